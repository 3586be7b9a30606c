from .model import (
    BLOCK_NAME,
    MARKUP_TAG,
    BlockNode,
    ContentType,
    InvalidBlockTreeError,
    TagPolicy,
)
from .ids import SequentialIds, uuid_ids
from .policy import TagPolicyTable, default_policies
from .html_to_blocks import HTMLToBlocks, parse_html_to_blocks
from .blocks_to_html import BlocksToHTML, render_blocks_to_html
from .blocks_to_markup import BlocksToMarkup, serialize_blocks_to_markup
from .serialization import (
    block_from_dict,
    block_to_dict,
    blocks_from_dicts,
    blocks_to_dicts,
    dump_blocks_json,
    load_blocks_json,
)

__all__ = [
    "BLOCK_NAME",
    "MARKUP_TAG",
    "BlockNode",
    "ContentType",
    "InvalidBlockTreeError",
    "TagPolicy",
    "TagPolicyTable",
    "default_policies",
    "SequentialIds",
    "uuid_ids",
    "HTMLToBlocks",
    "parse_html_to_blocks",
    "BlocksToHTML",
    "render_blocks_to_html",
    "BlocksToMarkup",
    "serialize_blocks_to_markup",
    "block_from_dict",
    "block_to_dict",
    "blocks_from_dicts",
    "blocks_to_dicts",
    "dump_blocks_json",
    "load_blocks_json",
]
