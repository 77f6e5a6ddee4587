"""
Unit tests for Markdown format strategy.
"""

import pytest
from mdtokens.dom import Node, text
from mdtokens.formats.base import registry
from mdtokens.formats.markdown import MarkdownStrategy, escape_text
from mdtokens.tokens import parse_tokens


@pytest.fixture
def strategy():
    return MarkdownStrategy(preset="commonmark", extensions=["table", "strikethrough"])


class TestMarkdownParsing:
    def test_parse_empty(self, strategy):
        """Empty content returns root with no children."""
        root = strategy.parse("")
        assert root.type == "root"
        assert root.children == []

    def test_parse_paragraph(self, strategy):
        root = strategy.parse("hello world")
        assert root.children == [Node(type="paragraph", children=[text("hello world")])]

    def test_parse_multiple_paragraphs(self, strategy):
        root = strategy.parse("one\n\ntwo")
        assert [p.type for p in root.children] == ["paragraph", "paragraph"]

    def test_text_pieces_merge(self, strategy):
        """markdown-it splits text at ':' and '^'; the tree must not."""
        root = strategy.parse("a :^b: c")
        assert root.children[0].children == [text("a :^b: c")]

    def test_softbreak_joins_text(self, strategy):
        root = strategy.parse("a\n:^b:")
        assert root.children[0].children == [text("a\n:^b:")]

    def test_inline_elements(self, strategy):
        root = strategy.parse("*a* **b** ~~c~~ `d`")
        types = [c.type for c in root.children[0].children]
        assert types == ["emphasis", "text", "strong", "text", "delete", "text", "inlineCode"]
        assert root.children[0].children[-1].value == "d"

    def test_heading_depth(self, strategy):
        root = strategy.parse("## Title")
        heading = root.children[0]
        assert heading.type == "heading"
        assert heading.attrs == {"depth": 2}
        assert heading.children == [text("Title")]

    def test_link_and_image(self, strategy):
        root = strategy.parse('[site](http://x.org "T") ![alt](a.png)')
        link, _, image = root.children[0].children
        assert link.type == "link"
        assert link.attrs == {"url": "http://x.org", "title": "T"}
        assert link.children == [text("site")]
        assert image.type == "image"
        assert image.attrs == {"url": "a.png", "alt": "alt"}
        assert not image.is_parent

    def test_code_block(self, strategy):
        root = strategy.parse("```python\nx = 1\n```")
        code = root.children[0]
        assert code.type == "code"
        assert code.value == "x = 1"
        assert code.attrs == {"lang": "python"}

    def test_lists(self, strategy):
        root = strategy.parse("- a\n- b\n\n3. c")
        bullet, ordered = root.children
        assert bullet.type == "list"
        assert bullet.attrs == {"ordered": False}
        assert [i.type for i in bullet.children] == ["listItem", "listItem"]
        assert bullet.children[0].children[0].type == "paragraph"
        assert ordered.attrs == {"ordered": True, "start": 3}

    def test_table(self, strategy):
        root = strategy.parse("| a | b |\n| - | - |\n| c | d |")
        table = root.children[0]
        assert table.type == "table"
        assert [r.type for r in table.children] == ["tableRow", "tableRow"]
        assert [c.type for c in table.children[0].children] == ["tableCell", "tableCell"]

    def test_blockquote_and_rule(self, strategy):
        root = strategy.parse("> quoted\n\n***")
        assert [c.type for c in root.children] == ["blockquote", "thematicBreak"]

    def test_extensions_off(self):
        plain = MarkdownStrategy(preset="commonmark", extensions=[])
        root = plain.parse("~~a~~")
        assert root.children[0].children == [text("~~a~~")]


class TestMarkdownRender:
    @pytest.mark.parametrize("source", [
        "a",
        "a :b: c",
        "*a* **b** ~~c~~ `d`",
        "## Title",
        "[site](http://x.org)",
        "![alt](a.png)",
        "```python\nx = 1\n```",
        "- a\n- b",
        "3. c\n4. d",
        "> quoted",
        "| a | b |\n| --- | --- |\n| c | d |",
        "one\n\ntwo",
    ])
    def test_stable_source(self, strategy, source):
        assert strategy.render(strategy.parse(source)) == source

    def test_empty_emphasis(self, strategy):
        tree = Node(type="root", children=[
            Node(type="paragraph", children=[Node(type="emphasis", children=[])]),
        ])
        assert strategy.render(tree) == "**"

    def test_code_span_with_backtick(self, strategy):
        tree = Node(type="root", children=[
            Node(type="paragraph", children=[Node(type="inlineCode", value="a`b")]),
        ])
        assert strategy.render(tree) == "`` a`b ``"

    def test_render_empty_root(self, strategy):
        assert strategy.render(Node(type="root", children=[])) == ""


class TestEscaping:
    @pytest.mark.parametrize("source", [
        r"\*not em\*",
        r"1\. not a list",
        r"\# not a heading",
        r"\- not a bullet",
        r"\[not\] a link",
        r"a \`b\` c",
        "line\n\\+ continued",
    ])
    def test_escaped_source_is_stable(self, strategy, source):
        assert strategy.render(strategy.parse(source)) == source

    def test_escaped_emphasis_stays_text(self, strategy):
        root = parse_tokens(strategy.parse(r"\*not em\* :^t:"))
        rendered = strategy.render(root)
        assert rendered == r"\*not em\*"
        assert [c.type for c in strategy.parse(rendered).children[0].children] == ["text"]

    def test_escaped_number_stays_paragraph(self, strategy):
        rendered = strategy.render(strategy.parse(r"1\. not a list"))
        assert strategy.parse(rendered).children[0].type == "paragraph"

    def test_markers_stay_literal(self, strategy):
        root = parse_tokens(strategy.parse("see :snake_case:"))
        assert strategy.render(root) == "see :snake_case:"

    def test_block_markers_only_at_line_start(self):
        assert escape_text("a - b 1. c") == "a - b 1. c"
        assert escape_text("- b", line_start=True) == r"\- b"
        assert escape_text("a\n2) b") == "a\n2\\) b"

    def test_inline_chars_anywhere(self):
        assert escape_text("a_b <c> & d|e") == r"a\_b \<c\> \& d\|e"


def test_registered_for_extensions():
    assert registry.get(".md").name == "markdown"
    assert registry.get("MARKDOWN").name == "markdown"
