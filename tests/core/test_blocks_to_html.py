# tests/core/test_blocks_to_html.py
import pytest

from universal_block import (
    BlockNode,
    BlocksToHTML,
    ContentType,
    InvalidBlockTreeError,
    parse_html_to_blocks,
    render_blocks_to_html,
)


def test_section_round_trip():
    """Voorbeeld uit de documentatie: section > h1 komt ongewijzigd terug."""
    html = '<section class="hero"><h1>Hi</h1></section>'
    assert render_blocks_to_html(parse_html_to_blocks(html)) == html


def test_void_element_renders_self_closing():
    assert render_blocks_to_html(parse_html_to_blocks('<img src="a.png">')) == '<img src="a.png" />'


def test_container_round_trip_preserves_structure():
    html = (
        '<div id="main"><section class="a"><article data-x="1">'
        '<ul><li>One</li><li>Two</li></ul></article></section>'
        '<footer><nav><a href="/">Home</a></nav></footer></div>'
    )
    blocks = parse_html_to_blocks(html)
    rendered = render_blocks_to_html(blocks)
    assert rendered == html
    assert parse_html_to_blocks(rendered) == blocks


def test_style_round_trips_as_data_style():
    rendered = render_blocks_to_html(parse_html_to_blocks('<p style="color:red">x</p>'))
    assert rendered == '<p data-style="color:red">x</p>'


def test_class_and_values_are_escaped():
    block = BlockNode(tag_name="div", class_name='a"b&c', attributes={"title": "it's <b>"})
    assert render_blocks_to_html([block]) == '<div class="a&quot;b&amp;c" title="it&#x27;s &lt;b&gt;"></div>'


def test_attribute_names_are_filtered():
    """Ongeldige tekens verdwijnen uit de naam; de waarde blijft in het blok staan."""
    block = BlockNode(tag_name="div", attributes={"data foo": "v", "on<x>": "1", "!!!": "gone"})
    html = render_blocks_to_html([block])
    assert html == '<div datafoo="v" onx="1"></div>'
    assert "data foo" not in html
    assert block.attributes["data foo"] == "v"


def test_class_is_emitted_first():
    block = BlockNode(tag_name="a", class_name="btn", attributes={"href": "/x", "id": "go"})
    assert render_blocks_to_html([block]) == '<a class="btn" href="/x" id="go"></a>'


def test_payload_is_not_escaped():
    text = BlockNode(tag_name="p", content_type=ContentType.TEXT, content="a < b & c")
    raw = BlockNode(tag_name="p", content_type=ContentType.HTML, content="x <em>y</em>")
    assert render_blocks_to_html([text, raw]) == "<p>a < b & c</p><p>x <em>y</em></p>"


def test_policy_overrides_stored_flag():
    set_block = BlockNode(tag_name="set", attributes={"var": "x"}, self_closing=False)
    loop_block = BlockNode(tag_name="loop", content_type=ContentType.BLOCKS, self_closing=True)
    assert render_blocks_to_html([set_block]) == '<set var="x" />'
    assert render_blocks_to_html([loop_block]) == "<loop></loop>"


def test_void_fallback_and_stored_flag():
    assert render_blocks_to_html([BlockNode(tag_name="br")]) == "<br />"
    assert render_blocks_to_html([BlockNode(tag_name="my-widget", self_closing=True)]) == "<my-widget />"


def test_pretty_indents_children():
    blocks = parse_html_to_blocks("<div><section><p>x</p></section><p>y</p></div>")
    expected = (
        "<div>\n"
        "  <section>\n"
        "    <p>x</p>\n"
        "  </section>\n"
        "  <p>y</p>\n"
        "</div>"
    )
    assert render_blocks_to_html(blocks, pretty=True) == expected


def test_pretty_keeps_multiline_payload_verbatim():
    """Alleen elementen worden ingesprongen; regels binnen een payload blijven zoals ze zijn."""
    pre = BlockNode(tag_name="pre", content_type=ContentType.TEXT, content="line 1\nline 2")
    div = BlockNode(tag_name="div", content_type=ContentType.BLOCKS, children=[pre])
    assert render_blocks_to_html([div], pretty=True) == "<div>\n  <pre>line 1\nline 2</pre>\n</div>"


def test_siblings_are_joined_by_mode():
    blocks = parse_html_to_blocks("<p>a</p><p>b</p>")
    assert render_blocks_to_html(blocks) == "<p>a</p><p>b</p>"
    assert render_blocks_to_html(blocks, pretty=True) == "<p>a</p>\n<p>b</p>"


def test_renderer_does_not_mutate_blocks():
    blocks = parse_html_to_blocks('<div class="x"><p>Hi</p></div>')
    before = [b.model_dump() for b in blocks]
    BlocksToHTML(pretty=True).render(blocks)
    assert [b.model_dump() for b in blocks] == before


def test_empty_and_none_input():
    assert render_blocks_to_html([]) == ""
    assert render_blocks_to_html(None) == ""


@pytest.mark.parametrize("bad", ["<p>x</p>", {"name": "universal/element"}, 3, [{"name": "x"}]])
def test_invalid_arguments_raise(bad):
    with pytest.raises(InvalidBlockTreeError):
        render_blocks_to_html(bad)


def nested_divs(depth):
    block = BlockNode(tag_name="p", content_type=ContentType.TEXT, content="deep")
    for _ in range(depth):
        block = BlockNode(tag_name="div", content_type=ContentType.BLOCKS, children=[block])
    return block


def test_deeply_nested_tree_renders():
    """Bomen dieper dan de recursielimiet van Python worden gewoon gerenderd."""
    depth = 1500
    html = render_blocks_to_html([nested_divs(depth)])
    assert html == "<div>" * depth + "<p>deep</p>" + "</div>" * depth


def test_deeply_nested_tree_renders_pretty():
    lines = render_blocks_to_html([nested_divs(1500)], pretty=True).split("\n")
    assert len(lines) == 2 * 1500 + 1
    assert lines[1500] == "  " * 1500 + "<p>deep</p>"
    assert lines[-1] == "</div>"


def test_deeply_nested_tree_equality():
    assert nested_divs(1500) == nested_divs(1500)
    assert nested_divs(1500) != nested_divs(1499)
