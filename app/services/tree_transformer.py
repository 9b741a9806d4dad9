import logging
from typing import Any, Callable, Dict, List, Optional, Sequence
from pydantic import ValidationError
from app.models.question_tree import FlatItem, NodeKind, TreeDocument, TreeNode

logger = logging.getLogger(__name__)

ITEM_KEYS = ("branches", "questions")


class TreeTransformError(ValueError):
    """Raised when a content object cannot be turned into a question tree."""
    pass


class ContentShapeError(TreeTransformError):
    """Raised when the content has no usable branches/questions collection."""
    pass


class RootNotFoundError(TreeTransformError):
    """Raised when no item can be resolved as the tree root."""
    pass


RootResolver = Callable[[Dict[str, Any], Sequence[FlatItem]], Optional[str]]


def explicit_root(data: Dict[str, Any], items: Sequence[FlatItem]) -> Optional[str]:
    root = data.get("root")
    return str(root) if root not in (None, "") else None


def literal_root(data: Dict[str, Any], items: Sequence[FlatItem]) -> Optional[str]:
    return "root"


def literal_q1(data: Dict[str, Any], items: Sequence[FlatItem]) -> Optional[str]:
    return "q1"


def first_item(data: Dict[str, Any], items: Sequence[FlatItem]) -> Optional[str]:
    return items[0].id if items else None


# Tried in order; the first candidate present in the index becomes the root.
ROOT_RESOLVERS: Sequence[RootResolver] = (explicit_root, literal_root, literal_q1, first_item)


def extract_items(data: Any) -> List[Any]:
    if not isinstance(data, dict):
        raise ContentShapeError("Content is not an object")
    for key in ITEM_KEYS:
        raw = data.get(key)
        if raw is None:
            continue
        if not isinstance(raw, list):
            raise ContentShapeError(f"'{key}' must be a list, got {type(raw).__name__}")
        if raw:
            return raw
    raise ContentShapeError("No transformable content: 'branches' and 'questions' are missing or empty")


def normalize_items(raw_items: List[Any]) -> List[FlatItem]:
    """Maps both historical item shapes onto FlatItem, skipping malformed entries."""
    items = []
    for position, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            logger.warning(f"Skipping item #{position}: expected an object, got {type(raw).__name__}")
            continue
        try:
            items.append(FlatItem.model_validate(raw))
        except ValidationError as e:
            logger.warning(f"Skipping malformed item #{position} ({raw.get('id')!r}): {e.error_count()} validation error(s)")
    return items


def resolve_root(data: Dict[str, Any], items: Sequence[FlatItem], index: Dict[str, FlatItem],
                 resolvers: Sequence[RootResolver] = ROOT_RESOLVERS) -> str:
    for resolver in resolvers:
        candidate = resolver(data, items)
        if candidate is not None and candidate in index:
            return candidate
    raise RootNotFoundError("No root item could be resolved")


def link_children(index: Dict[str, FlatItem], root_id: str) -> Dict[str, List[str]]:
    """
    Builds the child id lists for every item.
    parent_id linkage wins over the root's follow_up_ids, and every item
    is attached at most once.
    """
    children: Dict[str, List[str]] = {item_id: [] for item_id in index}
    attached = set()

    for item in index.values():
        if item.id == root_id:
            for follow_up_id in item.follow_up_ids:
                follow_up = index.get(follow_up_id)
                if follow_up is None:
                    logger.debug(f"Root follow-up '{follow_up_id}' does not exist, skipping")
                    continue
                if follow_up_id == root_id or follow_up.parent_id or follow_up_id in attached:
                    continue
                children[root_id].append(follow_up_id)
                attached.add(follow_up_id)
            continue

        if item.parent_id:
            if item.parent_id not in index:
                logger.debug(f"Item '{item.id}' references missing parent '{item.parent_id}', dropping")
                continue
            if item.id not in attached:
                children[item.parent_id].append(item.id)
                attached.add(item.id)

    return children


def build_node(item_id: str, index: Dict[str, FlatItem], children: Dict[str, List[str]],
               is_root: bool = False) -> TreeNode:
    item = index[item_id]
    child_nodes = tuple(build_node(child_id, index, children) for child_id in children[item_id])
    if is_root:
        kind = NodeKind.ROOT
    else:
        kind = NodeKind.BRANCH if child_nodes else NodeKind.LEAF
    return TreeNode(
        id=item.id,
        question=item.text,
        intent=item.intent,
        expected_signal=item.expected_signal,
        kind=kind,
        children=child_nodes,
        metadata=item.metadata,
    )


def text_field(data: Dict[str, Any], key: str) -> Optional[str]:
    """Reads a top-level text field, tolerating numbers and ignoring other types."""
    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    logger.warning(f"Ignoring '{key}': expected text, got {type(value).__name__}")
    return None


def default_title(data: Dict[str, Any], content_id: Optional[str]) -> str:
    name = text_field(data, "id") or content_id
    return f"{name} Question Tree" if name else "Question Tree"


def transform_tree(data: Any, content_id: Optional[str] = None) -> TreeDocument:
    """
    Converts a flat question tree content object into a TreeDocument.

    Raises ContentShapeError when there is no branches/questions collection
    and RootNotFoundError when no root can be resolved. Items whose parent
    cannot be found are left out of the tree.
    """
    items = normalize_items(extract_items(data))

    index: Dict[str, FlatItem] = {}
    for item in items:
        index[item.id] = item

    root_id = resolve_root(data, items, index)
    children = link_children(index, root_id)

    try:
        root = build_node(root_id, index, children, is_root=True)
        return TreeDocument(
            title=text_field(data, "title") or default_title(data, content_id),
            description=text_field(data, "summary") or text_field(data, "description"),
            root=root,
        )
    except ValidationError as e:
        raise ContentShapeError(f"Content could not be built into a tree: {e.error_count()} validation error(s)") from e
