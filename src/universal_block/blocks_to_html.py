# src/universal_block/blocks_to_html.py
import html
import logging
import re
from collections.abc import Sequence as SequenceABC
from typing import List, Optional, Sequence

from .model import BlockNode, ContentType, InvalidBlockTreeError, is_void_element
from .policy import TagPolicyTable, default_policies

logger = logging.getLogger(__name__)

INDENT_UNIT = "  "
_ATTR_NAME_DISALLOWED = re.compile(r"[^A-Za-z0-9_-]")

_DONE = object()


def escape_attribute(value) -> str:
    """Escapes &, ", ', < and > for use inside a double-quoted attribute value."""
    return html.escape(str(value), quote=True)


def clean_attribute_name(name: str) -> str:
    """Keeps only [A-Za-z0-9_-]; anything else is dropped from the emitted name."""
    return _ATTR_NAME_DISALLOWED.sub("", name)


class BlocksToHTML:
    """
    Renders a block tree back into HTML.

    Payloads of text/html blocks are emitted verbatim (they are assumed to be
    well-formed already); only attribute names and values are sanitized.
    """

    def __init__(self, policies: Optional[TagPolicyTable] = None, pretty: bool = False):
        self.policies = policies if policies is not None else default_policies()
        self.pretty = pretty

    def render(self, blocks: Sequence[BlockNode], indent: int = 0) -> str:
        """
        Renders `blocks` as sibling elements at nesting level `indent`.

        Nested blocks are rendered from an explicit stack of frames
        (parent block, child level, pending entries, rendered parts), so deep
        trees never hit the interpreter's recursion limit.
        """
        if blocks is None:
            return ""
        if isinstance(blocks, (str, bytes)) or not isinstance(blocks, SequenceABC):
            raise InvalidBlockTreeError(f"Expected a sequence of blocks, got {type(blocks).__name__}")

        separator = "\n" if self.pretty else ""
        top: List[str] = []
        stack = [(None, indent, iter(blocks), top)]

        while stack:
            parent, level, entries, parts = stack[-1]
            block = next(entries, _DONE)

            if block is _DONE:
                stack.pop()
                if parent is not None:
                    inner = separator.join(parts)
                    if self.pretty:
                        # Children already carry their own indentation
                        inner = f"\n{inner}\n{INDENT_UNIT * (level - 1)}"
                    stack[-1][3].append(self._element(parent, level - 1, inner))
                continue

            if not isinstance(block, BlockNode):
                raise InvalidBlockTreeError(f"Expected a BlockNode, got {type(block).__name__}")

            if self._renders_children(block):
                stack.append((block, level + 1, iter(block.children), []))
            else:
                parts.append(self._element(block, level, self._payload(block)))

        return separator.join(top)

    def render_block(self, block: BlockNode, indent: int = 0) -> str:
        if not isinstance(block, BlockNode):
            raise InvalidBlockTreeError(f"Expected a BlockNode, got {type(block).__name__}")
        return self.render([block], indent)

    def build_attributes(self, block: BlockNode) -> str:
        out = ""
        if block.class_name:
            out += f' class="{escape_attribute(block.class_name)}"'

        for name, value in block.attributes.items():
            clean = clean_attribute_name(name)
            if not clean:
                logger.debug("Dropping attribute with unusable name %r on <%s>", name, block.tag_name)
                continue
            out += f' {clean}="{escape_attribute(value)}"'
        return out

    def is_self_closing(self, block: BlockNode) -> bool:
        policy = self.policies.lookup(block.tag_name)
        if policy is not None and policy.force_self_closing is not None:
            return policy.force_self_closing
        return block.self_closing or is_void_element(block.tag_name)

    def _renders_children(self, block: BlockNode) -> bool:
        return (
            block.content_type == ContentType.BLOCKS
            and bool(block.children)
            and not self.is_self_closing(block)
        )

    def _element(self, block: BlockNode, level: int, inner: str) -> str:
        tag = block.tag_name or "div"
        attrs = self.build_attributes(block)
        prefix = INDENT_UNIT * level if self.pretty else ""

        if self.is_self_closing(block):
            return f"{prefix}<{tag}{attrs} />"
        return f"{prefix}<{tag}{attrs}>{inner}</{tag}>"

    @staticmethod
    def _payload(block: BlockNode) -> str:
        # text/html payloads go out verbatim, pretty mode does not re-indent their lines
        if block.content_type in (ContentType.TEXT, ContentType.HTML):
            return block.content or ""
        return ""


def render_blocks_to_html(
        blocks: Sequence[BlockNode],
        *,
        pretty: bool = False,
        indent: int = 0,
        policies: Optional[TagPolicyTable] = None,
) -> str:
    """Functional entry point for BlocksToHTML.render."""
    return BlocksToHTML(policies=policies, pretty=pretty).render(blocks, indent)
