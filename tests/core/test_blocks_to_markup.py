# tests/core/test_blocks_to_markup.py
import json

import pytest

from universal_block import (
    BlockNode,
    ContentType,
    InvalidBlockTreeError,
    SequentialIds,
    parse_html_to_blocks,
    serialize_blocks_to_markup,
)

OPEN = "<!-- wp:universal/element "
CLOSE = "<!-- /wp:universal/element -->"


def attrs_of(line: str) -> dict:
    """Haalt het JSON-object uit een openende of zelfsluitende commentaarregel."""
    body = line.strip()[len(OPEN):]
    body = body[: body.rindex("}") + 1]
    return json.loads(body)


def test_void_block_is_single_comment():
    markup = serialize_blocks_to_markup(parse_html_to_blocks('<img src="a.png">'))
    assert markup.startswith(OPEN)
    assert markup.endswith(" /-->")
    assert CLOSE not in markup

    attrs = attrs_of(markup)
    assert attrs["tagName"] == "img"
    assert attrs["contentType"] == "empty"
    assert attrs["selfClosing"] is True
    assert attrs["globalAttrs"] == {"src": "a.png"}
    assert attrs["isDynamic"] is False
    assert attrs["elementType"] == "text"


def test_text_block_is_paired_on_one_line():
    markup = serialize_blocks_to_markup(parse_html_to_blocks("<h1>Hi</h1>"))
    assert "\n" not in markup
    assert markup.endswith(" -->" + CLOSE)
    assert attrs_of(markup)["content"] == "Hi"


@pytest.mark.parametrize("content_type", [ContentType.TEXT, ContentType.HTML])
def test_empty_payload_is_self_closing(content_type):
    block = BlockNode(tag_name="p", content_type=content_type, content="")
    assert serialize_blocks_to_markup([block]).endswith(" /-->")


def test_blocks_without_children_stay_paired():
    block = BlockNode(tag_name="div", content_type=ContentType.BLOCKS)
    markup = serialize_blocks_to_markup([block])
    assert markup.endswith(" -->" + CLOSE)


def test_children_are_nested_and_indented():
    """Elk niveau wordt met vier spaties ingesprongen."""
    blocks = parse_html_to_blocks(
        '<section class="hero"><div><h1>Hi</h1></div><img src="a.png"></section>',
        id_factory=SequentialIds(),
    )
    lines = serialize_blocks_to_markup(blocks).split("\n")

    assert lines[0].startswith(OPEN)
    assert attrs_of(lines[0])["className"] == "hero"
    assert lines[1].startswith("    " + OPEN)
    assert lines[2].startswith("        " + OPEN)
    assert attrs_of(lines[2])["tagName"] == "h1"
    assert lines[3] == "    " + CLOSE
    assert lines[4].startswith("    " + OPEN) and lines[4].endswith(" /-->")
    assert lines[5] == CLOSE
    assert len(lines) == 6


def test_siblings_are_newline_separated():
    markup = serialize_blocks_to_markup(parse_html_to_blocks("<p>a</p><hr><p>b</p>"))
    assert len(markup.split("\n")) == 3


def test_legacy_fields_are_kept_when_present():
    block = BlockNode(tag_name="p", extras={"isDynamic": True, "elementType": "html"})
    attrs = attrs_of(serialize_blocks_to_markup([block]))
    assert attrs["isDynamic"] is True
    assert attrs["elementType"] == "html"


def test_ids_are_not_serialized():
    markup = serialize_blocks_to_markup(parse_html_to_blocks("<p>x</p>", id_factory=SequentialIds()))
    assert "block-1" not in markup


def test_invalid_arguments_raise():
    with pytest.raises(InvalidBlockTreeError):
        serialize_blocks_to_markup("<p>x</p>")
    assert serialize_blocks_to_markup([]) == ""


def test_deeply_nested_tree_serializes():
    """Ook de commentaar-markup werkt voor bomen dieper dan de recursielimiet."""
    depth = 1500
    block = BlockNode(tag_name="p", content_type=ContentType.TEXT, content="deep")
    for _ in range(depth):
        block = BlockNode(tag_name="div", content_type=ContentType.BLOCKS, children=[block])

    lines = serialize_blocks_to_markup([block]).split("\n")

    assert len(lines) == 2 * depth + 1
    assert attrs_of(lines[depth])["content"] == "deep"
    assert lines[depth].startswith("    " * depth + OPEN)
    assert lines[-1] == CLOSE
