# src/universal_block/serialization.py
"""
Persisted (editor) form of a block tree:

    [{"id": "...", "name": "universal/element", "isValid": true,
      "attributes": {"tagName": "section", "className": "hero", "contentType": "blocks",
                     "selfClosing": false, "globalAttrs": {...}, ...},
      "innerBlocks": [...]}]
"""
import json
import logging
from typing import Any, Dict, List, Sequence

from .model import BLOCK_NAME, BlockNode, ContentType, InvalidBlockTreeError

logger = logging.getLogger(__name__)

# Attribute keys mapped onto BlockNode fields; everything else lands in `extras`.
CORE_ATTRIBUTE_KEYS = ("tagName", "className", "contentType", "selfClosing", "globalAttrs", "content")

_DONE = object()


def block_attributes(block: BlockNode) -> Dict[str, Any]:
    """The block's non-tree attributes, as stored by the editor."""
    attrs: Dict[str, Any] = {"tagName": block.tag_name}
    if block.class_name:
        attrs["className"] = block.class_name
    attrs["contentType"] = block.content_type.value
    attrs["selfClosing"] = block.self_closing
    attrs["globalAttrs"] = dict(block.attributes)
    if block.content_type in (ContentType.TEXT, ContentType.HTML):
        attrs["content"] = block.content

    for key, value in block.extras.items():
        if key not in attrs:
            attrs[key] = value
    return attrs


def _entry_shell(block: BlockNode) -> Dict[str, Any]:
    return {
        "id": block.id,
        "name": BLOCK_NAME,
        "isValid": True,
        "attributes": block_attributes(block),
        "innerBlocks": [],
    }


def block_to_dict(block: BlockNode) -> Dict[str, Any]:
    return blocks_to_dicts([block])[0]


def blocks_to_dicts(blocks: Sequence[BlockNode]) -> List[Dict[str, Any]]:
    top: List[Dict[str, Any]] = []
    # Pre-order with an explicit stack; each entry knows the list it belongs to
    stack = [(block, top) for block in reversed(blocks)]
    while stack:
        block, target = stack.pop()
        entry = _entry_shell(block)
        target.append(entry)
        stack.extend((child, entry["innerBlocks"]) for child in reversed(block.children))
    return top


def _block_fields(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise InvalidBlockTreeError(f"Block entry must be an object, got {type(data).__name__}")

    attrs = data.get("attributes") or {}
    if not isinstance(attrs, dict):
        raise InvalidBlockTreeError("Block 'attributes' must be an object")

    return {
        "id": str(data.get("id") or data.get("clientId") or ""),
        "tag_name": attrs.get("tagName") or "div",
        "class_name": attrs.get("className") or None,
        "attributes": attrs.get("globalAttrs") or {},
        "content_type": attrs.get("contentType") or ContentType.TEXT,
        "content": attrs.get("content") or "",
        "self_closing": bool(attrs.get("selfClosing", False)),
        "extras": {k: v for k, v in attrs.items() if k not in CORE_ATTRIBUTE_KEYS},
    }


def _inner_entries(data: Dict[str, Any]) -> List[Any]:
    inner = data.get("innerBlocks") or []
    if not isinstance(inner, list):
        raise InvalidBlockTreeError(f"Expected a list of blocks, got {type(inner).__name__}")
    return inner


def block_from_dict(data: Dict[str, Any]) -> BlockNode:
    """
    Rebuilds a BlockNode from its persisted form.

    The content-type/payload exclusivity is NOT checked here; a persisted tree
    that carries both content and innerBlocks is the caller's problem.
    """
    fields = _block_fields(data)
    return BlockNode(children=blocks_from_dicts(_inner_entries(data)), **fields)


def blocks_from_dicts(data: Any) -> List[BlockNode]:
    """Loads a list of persisted blocks, skipping entries that are not element blocks."""
    if not isinstance(data, list):
        raise InvalidBlockTreeError(f"Expected a list of blocks, got {type(data).__name__}")

    top: List[BlockNode] = []
    # Post-order: a node is built once all of its inner blocks are
    stack = [(iter(data), top, None)]
    while stack:
        entries, collected, fields = stack[-1]
        entry = next(entries, _DONE)

        if entry is _DONE:
            stack.pop()
            if fields is not None:
                stack[-1][1].append(BlockNode(children=collected, **fields))
            continue

        if isinstance(entry, dict) and entry.get("name") != BLOCK_NAME:
            logger.debug("Skipping unsupported block type: %s", entry.get("name"))
            continue
        entry_fields = _block_fields(entry)
        stack.append((iter(_inner_entries(entry)), [], entry_fields))
    return top


def dump_blocks_json(blocks: Sequence[BlockNode], pretty: bool = False) -> str:
    data = blocks_to_dicts(blocks)
    if pretty:
        return json.dumps(data, ensure_ascii=False, indent=2)
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


def load_blocks_json(text: str) -> List[BlockNode]:
    """Parses persisted JSON text. Raises json.JSONDecodeError on invalid JSON."""
    return blocks_from_dicts(json.loads(text))
