from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

# Field name -> input keys, in the order they are tried
FLAT_ITEM_ALIASES = {
    "text": ("q", "question", "text"),
    "expected_signal": ("signal", "expectedSignal", "expected_signal"),
    "parent_id": ("parent", "parentId", "parent_id"),
}


def freeze(value):
    """Recursively turns dicts into read-only mappings and lists into tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    return value


def thaw(value):
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(item) for item in value]
    return value


class NodeKind(str, Enum):
    ROOT = "root"
    BRANCH = "branch"
    LEAF = "leaf"


class FlatItem(BaseModel):
    """
    One question as authored in a content file.
    Both historical shapes (q/signal/parent and question/expectedSignal/parentId)
    validate into this single representation.
    """
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str
    text: str = Field(validation_alias=AliasChoices("q", "question", "text"))
    intent: Optional[str] = None
    expected_signal: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("signal", "expectedSignal", "expected_signal"),
    )
    parent_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("parent", "parentId", "parent_id"),
    )
    follow_up_ids: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("followUpIds", "followUps", "follow_up_ids"),
    )
    metadata: Optional[Dict[str, Any]] = None

    @model_validator(mode="before")
    @classmethod
    def _first_truthy_alias(cls, data):
        # An empty or null "q" must not hide a filled-in "question"
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for field_name, keys in FLAT_ITEM_ALIASES.items():
            value = next((data[key] for key in keys if data.get(key)), None)
            for key in keys:
                data.pop(key, None)
            if value is not None:
                data[field_name] = value
        return data

    @field_validator("follow_up_ids", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return [] if value is None else value


class TreeNode(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    question: str
    intent: Optional[str] = None
    expected_signal: Optional[str] = Field(default=None, alias="expectedSignal")
    kind: NodeKind
    children: Tuple["TreeNode", ...] = ()
    metadata: Optional[Dict[str, Any]] = None

    @field_validator("metadata", mode="after")
    @classmethod
    def _freeze_metadata(cls, value):
        return None if value is None else freeze(value)

    @field_serializer("metadata")
    def _serialize_metadata(self, value):
        return None if value is None else thaw(value)

    @property
    def is_leaf(self) -> bool:
        return not self.children


TreeNode.model_rebuild()


class TreeDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    description: Optional[str] = None
    root: TreeNode

    def iter_nodes(self) -> Iterator[TreeNode]:
        """Pre-order walk over every node, root first."""
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def node_count(self) -> int:
        return sum(1 for _ in self.iter_nodes())

    def depth(self) -> int:
        deepest = 0
        stack = [(self.root, 1)]
        while stack:
            node, level = stack.pop()
            deepest = max(deepest, level)
            stack.extend((child, level + 1) for child in node.children)
        return deepest

    def find(self, node_id: str) -> Optional[TreeNode]:
        for node in self.iter_nodes():
            if node.id == node_id:
                return node
        return None


class TreeSummary(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
