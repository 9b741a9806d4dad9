import logging
from typing import List
from fastapi import APIRouter, Request, HTTPException
from app.core import config
from app.models.question_tree import TreeDocument, TreeSummary
from app.services.tree_transformer import transform_tree, TreeTransformError

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_FOUND_DETAIL = "Tree not found"


def load_tree(request: Request, tree_id: str) -> TreeDocument:
    """
    Loads and transforms a tree. A missing file and an untransformable one
    both end in the same 404; only the logs tell them apart.
    """
    store = request.app.state.content_store
    data = store.load_content(tree_id)
    if data is None:
        logger.info(f"Tree {tree_id}: content missing")
        raise HTTPException(404, NOT_FOUND_DETAIL)
    try:
        return transform_tree(data, content_id=tree_id)
    except TreeTransformError as e:
        logger.warning(f"Tree {tree_id}: {type(e).__name__}: {e}")
        raise HTTPException(404, NOT_FOUND_DETAIL)


def list_summaries(request: Request) -> List[TreeSummary]:
    store = request.app.state.content_store
    summaries = []
    for tree_id in store.list_ids():
        data = store.load_content(tree_id)
        if data is None:
            continue
        try:
            doc = transform_tree(data, content_id=tree_id)
        except TreeTransformError as e:
            logger.warning(f"Tree {tree_id} left out of listing: {type(e).__name__}: {e}")
            continue
        summaries.append(TreeSummary(id=tree_id, title=doc.title, description=doc.description))
    return summaries


@router.get("/")
def index(request: Request):
    return request.app.state.render(
        "index.html",
        request=request,
        site_name=config.SITE_NAME,
        trees=list_summaries(request),
    )


@router.get("/tree/{tree_id}")
def tree_page(request: Request, tree_id: str):
    doc = load_tree(request, tree_id)
    return request.app.state.render(
        "tree.html",
        request=request,
        site_name=config.SITE_NAME,
        tree_id=tree_id,
        doc=doc,
        node_count=doc.node_count(),
        depth=doc.depth(),
    )


@router.get("/api/trees", response_model=List[TreeSummary])
def api_list_trees(request: Request):
    return list_summaries(request)


@router.get("/api/trees/{tree_id}", response_model=TreeDocument)
def api_get_tree(request: Request, tree_id: str):
    return load_tree(request, tree_id)
