# src/universal_block/html_to_blocks.py
import logging
import re
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, Tag

from .ids import IdFactory, uuid_ids
from .model import BlockNode, ContentType
from .policy import TagPolicyTable, default_policies
from .rules import DEFAULT_RULES, Classification, ClassificationRule, classify, is_text_node

logger = logging.getLogger(__name__)

# Tag names may carry hyphens (custom elements such as <my-include />)
SELF_CLOSING_TAG_RE = re.compile(r"<([A-Za-z][\w-]*)([^>]*?)/>")

# Page wrappers that add no block of their own when met at the top level
DOCUMENT_WRAPPERS = frozenset({"html", "head", "body"})

_DONE = object()


class _PendingElement(NamedTuple):
    """An element whose block is built once its children have been converted."""
    block_id: str
    tag_name: str
    class_name: Optional[str]
    attributes: Dict[str, str]
    result: Classification


def editor_metadata(tag_name: str, content_type: ContentType) -> Dict[str, Any]:
    """Bookkeeping attributes the block editor expects on freshly created blocks."""
    return {
        "blockName": tag_name[:1].upper() + tag_name[1:],
        "category": "custom",
        "uiState": {
            "tagCategory": "custom",
            "selectedTagName": tag_name,
            "selectedContentType": content_type.value,
        },
    }


class HTMLToBlocks:
    """
    Converts an HTML fragment into a list of BlockNode trees.

    Parsing is delegated to BeautifulSoup (html.parser), whose error recovery
    is accepted as-is: malformed markup never raises. Element classification
    is delegated to the rule chain in `rules.py`.
    """

    def __init__(
            self,
            policies: Optional[TagPolicyTable] = None,
            id_factory: Optional[IdFactory] = None,
            rules: Sequence[ClassificationRule] = DEFAULT_RULES,
    ):
        self.policies = policies if policies is not None else default_policies()
        self.id_factory = id_factory or uuid_ids
        self.rules = rules

    def parse(self, html: Any) -> List[BlockNode]:
        """
        Parses a document fragment into top-level blocks.

        Args:
            html: The raw markup. Anything that is not a non-empty string yields [].

        Returns:
            List[BlockNode]: One block per surviving top-level node, in document order.
        """
        if not html or not isinstance(html, str):
            return []

        soup = BeautifulSoup(
            self.preprocess(html),
            "html.parser",
            # Keep `class` as the verbatim string instead of a token list
            multi_valued_attributes=None,
        )
        return self._convert_children(soup)

    def preprocess(self, html: str) -> str:
        """
        Rewrites `<tag ... />` into `<tag ...></tag>` for policy tags that are
        always self-closing, so the parser cannot treat them as open tags that
        swallow their following siblings. Void HTML elements are left alone.
        """
        forced = set(self.policies.self_closing_tags())

        def expand(match: re.Match) -> str:
            tag_name, attrs = match.group(1), match.group(2)
            if tag_name.lower() in forced:
                return f"<{tag_name}{attrs}></{tag_name}>"
            return match.group(0)

        return SELF_CLOSING_TAG_RE.sub(expand, html)

    def _convert_children(self, root: Tag) -> List[BlockNode]:
        """
        Converts the children of `root`, depth-first in document order.

        The walk keeps its own stack instead of recursing, so nesting depth is
        bounded by memory rather than the interpreter's recursion limit. Each
        frame holds an iterator over one element's child nodes, the blocks
        collected for it so far, and the pending element they belong to
        (None for the root and for the transparent document wrappers).
        """
        top: List[BlockNode] = []
        stack = [(iter(root.children), top, None)]

        while stack:
            nodes, collected, pending = stack[-1]
            node = next(nodes, _DONE)

            if node is _DONE:
                stack.pop()
                if pending is not None:
                    stack[-1][1].append(self._build_element(pending, collected))
                continue

            if not isinstance(node, Tag):
                block = self._convert_text(node)
                if block is not None:
                    collected.append(block)
                continue

            if pending is None and node.name.lower() in DOCUMENT_WRAPPERS:
                # <html>/<head>/<body> of a full page: their content lands at the top level
                stack.append((iter(node.children), collected, None))
                continue

            element = self._start_element(node)
            if element.result.descend:
                stack.append((iter(node.children), [], element))
            else:
                collected.append(self._build_element(element, []))

        return top

    def _convert_text(self, node) -> Optional[BlockNode]:
        if not is_text_node(node):
            logger.debug("Skipping non-element node: %s", type(node).__name__)
            return None

        text = node.strip()
        if not text:
            return None
        # Stray text outside any element gets a paragraph wrapper
        return BlockNode(
            id=self.id_factory(),
            tag_name="p",
            content_type=ContentType.TEXT,
            content=text,
            self_closing=False,
            extras=editor_metadata("p", ContentType.TEXT),
        )

    def _start_element(self, tag: Tag) -> _PendingElement:
        # Id first, so sequential ids follow document order (parent before children)
        block_id = self.id_factory()
        class_name, attributes = self._extract_attributes(tag)
        return _PendingElement(
            block_id=block_id,
            tag_name=tag.name.lower(),
            class_name=class_name,
            attributes=attributes,
            result=classify(tag, self.policies, self.rules),
        )

    @staticmethod
    def _build_element(element: _PendingElement, children: List[BlockNode]) -> BlockNode:
        result = element.result
        content = result.content if result.content_type in (ContentType.TEXT, ContentType.HTML) else ""

        return BlockNode(
            id=element.block_id,
            tag_name=element.tag_name,
            class_name=element.class_name,
            attributes=element.attributes,
            content_type=result.content_type,
            content=content,
            children=children,
            self_closing=result.self_closing,
            extras=editor_metadata(element.tag_name, result.content_type),
        )

    @staticmethod
    def _extract_attributes(tag: Tag) -> Tuple[Optional[str], Dict[str, str]]:
        """
        Splits the tag attributes into (className, globalAttrs).
        `style` is stored as `data-style` so editor previews never apply it live.
        """
        class_name = None
        attributes: Dict[str, str] = {}
        for name, value in tag.attrs.items():
            if isinstance(value, list):
                value = " ".join(value)
            value = "" if value is None else str(value)

            if name == "class":
                class_name = value
            elif name == "style":
                attributes["data-style"] = value
            else:
                attributes[name] = value
        return class_name, attributes


def parse_html_to_blocks(
        html: Any,
        *,
        policies: Optional[TagPolicyTable] = None,
        id_factory: Optional[IdFactory] = None,
) -> List[BlockNode]:
    """Functional entry point for HTMLToBlocks.parse."""
    return HTMLToBlocks(policies=policies, id_factory=id_factory).parse(html)
