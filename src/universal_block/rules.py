# src/universal_block/rules.py
"""
Priority-ordered classification rules for element nodes.

Each rule inspects one bs4 Tag and either returns a Classification or None
("not mine"). The forward transcoder runs them in order and takes the first
match, so the order of DEFAULT_RULES is the classification order.
"""
from typing import NamedTuple, Optional, Sequence

from bs4 import Tag
from bs4.element import NavigableString, PreformattedString

from .model import ContentType, is_void_element
from .policy import TagPolicyTable

CONTAINER_ELEMENTS = frozenset({
    "div", "section", "article", "header", "footer", "main", "nav", "aside",
    "ul", "ol", "li", "form", "fieldset", "blockquote", "figure", "button",
})

# Subtrees kept as opaque markup instead of being decomposed
RAW_MARKUP_ELEMENTS = frozenset({"svg"})


class Classification(NamedTuple):
    content_type: ContentType
    self_closing: bool
    content: str = ""
    descend: bool = False  # recurse into child nodes (blocks only)


# --- DOM helpers ---

def is_text_node(node) -> bool:
    """Plain text nodes only; comments, doctypes and CDATA are PreformattedStrings."""
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def has_element_children(tag: Tag) -> bool:
    return any(isinstance(child, Tag) for child in tag.children)


def has_text_content(tag: Tag) -> bool:
    """True if a direct text child contains something other than whitespace."""
    return any(is_text_node(child) and child.strip() for child in tag.children)


def inner_markup(tag: Tag) -> str:
    return tag.decode_contents()


def text_content(tag: Tag) -> str:
    return tag.get_text()


def payload_for(tag: Tag, content_type: ContentType) -> str:
    if content_type == ContentType.TEXT:
        return text_content(tag)
    if content_type == ContentType.HTML:
        return inner_markup(tag)
    return ""


# --- Rules ---

class ClassificationRule:
    name = "rule"

    def classify(self, tag: Tag, policies: TagPolicyTable) -> Optional[Classification]:
        raise NotImplementedError


class PolicyRule(ClassificationRule):
    """Dynamic tags: the policy decides everything, structure is ignored."""
    name = "policy"

    def classify(self, tag, policies):
        policy = policies.lookup(tag.name)
        if policy is None:
            return None

        content_type = policy.content_model
        if policy.force_self_closing is not None:
            self_closing = policy.force_self_closing
        else:
            self_closing = is_void_element(tag.name)

        return Classification(
            content_type=content_type,
            self_closing=self_closing,
            content=payload_for(tag, content_type),
            descend=content_type == ContentType.BLOCKS,
        )


class VoidElementRule(ClassificationRule):
    name = "void"

    def classify(self, tag, policies):
        if is_void_element(tag.name):
            return Classification(ContentType.EMPTY, self_closing=True)
        return None


class RawMarkupRule(ClassificationRule):
    name = "raw_markup"

    def __init__(self, tags=RAW_MARKUP_ELEMENTS):
        self.tags = frozenset(tags)

    def classify(self, tag, policies):
        if tag.name in self.tags:
            return Classification(ContentType.HTML, self_closing=False, content=inner_markup(tag))
        return None


class ContainerRule(ClassificationRule):
    name = "container"

    def __init__(self, tags=CONTAINER_ELEMENTS):
        self.tags = frozenset(tags)

    def classify(self, tag, policies):
        if tag.name in self.tags and has_element_children(tag):
            return Classification(ContentType.BLOCKS, self_closing=False, descend=True)
        return None


class MixedContentRule(ClassificationRule):
    """
    Non-container with element children: kept as opaque inner HTML.
    Presentational wrappers (<p><strong>..</strong> text</p>) stay intact this way.
    """
    name = "mixed_content"

    def classify(self, tag, policies):
        if has_element_children(tag):
            return Classification(ContentType.HTML, self_closing=False, content=inner_markup(tag))
        return None


class TextRule(ClassificationRule):
    name = "text"

    def classify(self, tag, policies):
        if has_text_content(tag):
            # Full text content, untrimmed
            return Classification(ContentType.TEXT, self_closing=False, content=text_content(tag))
        return None


class EmptyRule(ClassificationRule):
    name = "empty"

    def classify(self, tag, policies):
        return Classification(ContentType.EMPTY, self_closing=False)


DEFAULT_RULES: Sequence[ClassificationRule] = (
    PolicyRule(),
    VoidElementRule(),
    RawMarkupRule(),
    ContainerRule(),
    MixedContentRule(),
    TextRule(),
    EmptyRule(),
)


def classify(
        tag: Tag,
        policies: TagPolicyTable,
        rules: Sequence[ClassificationRule] = DEFAULT_RULES,
) -> Classification:
    """Runs the rule chain and returns the first match."""
    for rule in rules:
        result = rule.classify(tag, policies)
        if result is not None:
            return result
    # Only reachable with a custom chain that lacks a catch-all
    return Classification(ContentType.EMPTY, self_closing=is_void_element(tag.name))
