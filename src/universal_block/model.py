# src/universal_block/model.py
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Block name used by the editor for every element block.
BLOCK_NAME = "universal/element"

# Marker token used in the comment-delimited markup dialect.
MARKUP_TAG = f"wp:{BLOCK_NAME}"

VOID_ELEMENTS = frozenset({
    "img", "br", "hr", "input", "meta", "link", "area", "base",
    "col", "embed", "source", "track", "wbr",
})


class InvalidBlockTreeError(ValueError):
    """Raised when a block sequence (or one of its entries) has the wrong shape."""


class ContentType(str, Enum):
    """How a block stores its payload."""
    EMPTY = "empty"
    TEXT = "text"
    HTML = "html"
    BLOCKS = "blocks"


def is_void_element(tag_name: str) -> bool:
    return tag_name.lower() in VOID_ELEMENTS


def _attribute_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class TagPolicy(BaseModel):
    """
    Behavioral override for a tag whose content model cannot be inferred
    from the markup itself (the dynamic tags: set, loop, if).

    `force_self_closing` is tri-state: None leaves the decision to the
    void-element table.
    """
    model_config = ConfigDict(frozen=True)

    tag_name: str
    content_model: ContentType = ContentType.EMPTY
    force_self_closing: Optional[bool] = None
    label: str = ""
    category: str = "dynamic"
    description: str = ""

    @field_validator("tag_name")
    @classmethod
    def _lowercase_tag(cls, value: str) -> str:
        return value.strip().lower()


class BlockNode(BaseModel):
    """
    One HTML element in block form.

    Exactly one payload is meaningful per `content_type`: `content` for
    text/html, `children` for blocks. Nothing enforces this on load; callers
    handing in persisted trees are responsible for it.
    """
    model_config = ConfigDict(frozen=True)

    id: str = ""
    kind: Literal["universal/element"] = BLOCK_NAME
    tag_name: str
    class_name: Optional[str] = None
    attributes: Dict[str, str] = Field(default_factory=dict)
    content_type: ContentType = ContentType.EMPTY
    content: str = ""
    children: List["BlockNode"] = Field(default_factory=list)
    self_closing: bool = False
    extras: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("tag_name")
    @classmethod
    def _lowercase_tag(cls, value: str) -> str:
        return value.lower()

    @field_validator("attributes", mode="before")
    @classmethod
    def _stringify_values(cls, value: Any) -> Any:
        # Persisted trees may carry numbers or booleans as attribute values
        if isinstance(value, dict):
            return {str(k): _attribute_text(v) for k, v in value.items()}
        return value

    def _same_fields(self, other: "BlockNode") -> bool:
        return (
            self.tag_name == other.tag_name
            and self.class_name == other.class_name
            and self.attributes == other.attributes
            and self.content_type == other.content_type
            and self.content == other.content
            and self.self_closing == other.self_closing
            and self.extras == other.extras
            and len(self.children) == len(other.children)
        )

    def __eq__(self, other: object) -> bool:
        # Ids are opaque; two trees with the same shape are equal.
        if not isinstance(other, BlockNode):
            return NotImplemented

        pairs = [(self, other)]
        while pairs:
            left, right = pairs.pop()
            if not left._same_fields(right):
                return False
            pairs.extend(zip(left.children, right.children))
        return True

    __hash__ = None  # type: ignore[assignment]
