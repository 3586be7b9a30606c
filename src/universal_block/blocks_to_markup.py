# src/universal_block/blocks_to_markup.py
import json
import logging
from collections.abc import Sequence as SequenceABC
from typing import Any, Dict, List, Sequence

from .model import MARKUP_TAG, BlockNode, ContentType, InvalidBlockTreeError
from .serialization import block_attributes

logger = logging.getLogger(__name__)

INDENT_UNIT = "    "

# Legacy attributes the editor still expects on every block, with their defaults
LEGACY_DEFAULTS = (("isDynamic", False), ("elementType", "text"))

_DONE = object()


def markup_attributes(block: BlockNode) -> Dict[str, Any]:
    attrs = block_attributes(block)
    for key, default in LEGACY_DEFAULTS:
        if not attrs.get(key):
            attrs[key] = default
    return attrs


def is_void_comment(block: BlockNode) -> bool:
    """A block renders as a single `/-->` comment when it has nothing to wrap."""
    if block.children:
        return False
    if block.content_type == ContentType.EMPTY:
        return True
    if block.content_type in (ContentType.TEXT, ContentType.HTML):
        return not block.content
    return False


class BlocksToMarkup:
    """Serializes a block tree into the editor's comment-delimited block markup."""

    def serialize(self, blocks: Sequence[BlockNode], indent: int = 0) -> str:
        if blocks is None:
            return ""
        if isinstance(blocks, (str, bytes)) or not isinstance(blocks, SequenceABC):
            raise InvalidBlockTreeError(f"Expected a sequence of blocks, got {type(blocks).__name__}")

        top: List[str] = []
        # Frames: (parent block, child level, pending entries, serialized parts)
        stack = [(None, indent, iter(blocks), top)]

        while stack:
            parent, level, entries, parts = stack[-1]
            block = next(entries, _DONE)

            if block is _DONE:
                stack.pop()
                if parent is not None:
                    prefix = INDENT_UNIT * (level - 1)
                    inner = "\n".join(parts)
                    stack[-1][3].append(
                        f"{self._opening(parent, level - 1)}\n{inner}\n{prefix}<!-- /{MARKUP_TAG} -->"
                    )
                continue

            if not isinstance(block, BlockNode):
                raise InvalidBlockTreeError(f"Expected a BlockNode, got {type(block).__name__}")

            if block.children:
                stack.append((block, level + 1, iter(block.children), []))
            elif is_void_comment(block):
                attrs_json = json.dumps(markup_attributes(block), ensure_ascii=False, separators=(",", ":"))
                parts.append(f"{INDENT_UNIT * level}<!-- {MARKUP_TAG} {attrs_json} /-->")
            else:
                # Content travels inside the attributes JSON; nothing goes between the comments
                parts.append(f"{self._opening(block, level)}<!-- /{MARKUP_TAG} -->")

        return "\n".join(top)

    def serialize_block(self, block: BlockNode, indent: int = 0) -> str:
        if not isinstance(block, BlockNode):
            raise InvalidBlockTreeError(f"Expected a BlockNode, got {type(block).__name__}")
        return self.serialize([block], indent)

    @staticmethod
    def _opening(block: BlockNode, level: int) -> str:
        attrs_json = json.dumps(markup_attributes(block), ensure_ascii=False, separators=(",", ":"))
        return f"{INDENT_UNIT * level}<!-- {MARKUP_TAG} {attrs_json} -->"


def serialize_blocks_to_markup(blocks: Sequence[BlockNode], *, indent: int = 0) -> str:
    """Functional entry point for BlocksToMarkup.serialize."""
    return BlocksToMarkup().serialize(blocks, indent)
