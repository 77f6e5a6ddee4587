"""
Markdown format strategy.

Parses Markdown with markdown-it-py and converts its flat token stream into
an mdast-shaped tree (root > paragraph > text/emphasis/...). Renders a tree
back into Markdown.

Adjacent text pieces and soft line breaks are merged into one text leaf, so
every text leaf holds the full run of text between two inline elements.
Token syntax split across markdown-it text fragments is still seen whole.
"""

from __future__ import annotations

import logging
import re

from markdown_it import MarkdownIt
from markdown_it.token import Token

from ..config import get_config
from ..dom import Node, text
from .base import FormatStrategy, registry

logger = logging.getLogger(__name__)

# markdown-it open/close token names -> mdast container types
CONTAINER_TYPES = {
    "paragraph": "paragraph",
    "heading": "heading",
    "blockquote": "blockquote",
    "bullet_list": "list",
    "ordered_list": "list",
    "list_item": "listItem",
    "table": "table",
    "tr": "tableRow",
    "th": "tableCell",
    "td": "tableCell",
    "em": "emphasis",
    "strong": "strong",
    "s": "delete",
    "link": "link",
}

# Wrappers with no mdast counterpart, their rows go straight into the table
TRANSPARENT_TYPES = {"thead", "tbody"}

INLINE_MARKERS = {
    "emphasis": "*",
    "strong": "**",
    "delete": "~~",
}

BLOCK_SEPARATOR = "\n\n"

# Characters that open inline markup anywhere in a text run
MARKUP_CHARS = re.compile(r"([\\`*_~\[\]<>|&])")

# Block markers, only meaningful at the start of a line
BULLET_START = re.compile(r"^([ \t]*)([#+=-])", re.M)
ORDERED_START = re.compile(r"^([ \t]*\d+)([.)])", re.M)


def _container_attrs(token: Token, name: str) -> dict:
    if name == "heading":
        return {"depth": int(token.tag[1])}
    if name == "bullet_list":
        return {"ordered": False}
    if name == "ordered_list":
        return {"ordered": True, "start": int(token.attrGet("start") or 1)}
    if name == "link":
        attrs = {"url": token.attrGet("href") or ""}
        if token.attrGet("title"):
            attrs["title"] = token.attrGet("title")
        return attrs
    return {}


def _append_text(parent: Node, value: str) -> None:
    """Extend the trailing text leaf, or start a new one."""
    children = parent.children
    if children and children[-1].is_text:
        children[-1].value = (children[-1].value or "") + value
    else:
        parent.add_child(text(value))


def _add_leaf(token: Token, parent: Node) -> None:
    kind = token.type

    if kind == "inline":
        _build(token.children or [], parent)
    elif kind in ("text", "text_special"):
        _append_text(parent, token.content)
    elif kind == "softbreak":
        _append_text(parent, "\n")
    elif kind == "hardbreak":
        parent.add_child(Node(type="break"))
    elif kind == "code_inline":
        parent.add_child(Node(type="inlineCode", value=token.content))
    elif kind in ("fence", "code_block"):
        info = token.info.strip() if token.info else ""
        attrs = {"lang": info.split()[0]} if info else {}
        parent.add_child(Node(type="code", value=token.content.removesuffix("\n"), attrs=attrs))
    elif kind == "image":
        attrs = {"url": token.attrGet("src") or "", "alt": token.content}
        if token.attrGet("title"):
            attrs["title"] = token.attrGet("title")
        parent.add_child(Node(type="image", attrs=attrs))
    elif kind in ("html_inline", "html_block"):
        parent.add_child(Node(type="html", value=token.content.removesuffix("\n")))
    elif kind == "hr":
        parent.add_child(Node(type="thematicBreak"))
    else:
        logger.debug("Skipping unsupported markdown token %s", kind)


def _build(tokens: list[Token], parent: Node) -> None:
    """Turn a flat markdown-it token stream into children of `parent`."""
    stack: list[Node] = [parent]

    for token in tokens:
        if token.nesting == 1:
            name = token.type.removesuffix("_open")
            if name in TRANSPARENT_TYPES:
                continue
            node = Node(
                type=CONTAINER_TYPES.get(name, name),
                children=[],
                attrs=_container_attrs(token, name),
            )
            stack[-1].add_child(node)
            stack.append(node)
        elif token.nesting == -1:
            if token.type.removesuffix("_close") in TRANSPARENT_TYPES:
                continue
            stack.pop()
        else:
            _add_leaf(token, stack[-1])


def _code_span(value: str) -> str:
    fence = "`"
    while fence in value:
        fence += "`"
    if len(fence) > 1 or value.startswith("`") or value.endswith("`"):
        return f"{fence} {value} {fence}"
    return f"{fence}{value}{fence}"


def _title(node: Node) -> str:
    title = node.attrs.get("title")
    return f' "{title}"' if title else ""


def escape_text(value: str, line_start: bool = False) -> str:
    """
    Backslash-escape text so it renders back as the same text.

    Block markers (`#`, `-`, `1.`, ...) are escaped only where they begin a
    line; `line_start` says whether `value` itself begins one.
    """
    value = MARKUP_CHARS.sub(r"\\\1", value)
    if line_start:
        head, rest = "", value
    else:
        head, sep, rest = value.partition("\n")
        head += sep
    rest = BULLET_START.sub(r"\1\\\2", rest)
    rest = ORDERED_START.sub(r"\1\\\2", rest)
    return head + rest


def render_inline(node: Node, line_start: bool = False) -> str:
    """Render an inline node (or the inline content of a block)."""
    kind = node.type

    if kind in INLINE_MARKERS:
        marker = INLINE_MARKERS[kind]
        return marker + _render_children(node) + marker
    if kind == "inlineCode":
        return _code_span(node.value or "")
    if kind == "link":
        return f"[{_render_children(node)}]({node.attrs.get('url', '')}{_title(node)})"
    if kind == "image":
        return f"![{node.attrs.get('alt', '')}]({node.attrs.get('url', '')}{_title(node)})"
    if kind == "break":
        return "\\\n"
    if node.is_parent:
        return _render_children(node, line_start)
    # Token markers stay literal
    if node.is_text and node.token is None:
        return escape_text(node.value or "", line_start)
    return node.value or ""


def _render_children(node: Node, line_start: bool = False) -> str:
    parts: list[str] = []
    for child in node.children or ():
        rendered = render_inline(child, line_start)
        parts.append(rendered)
        if rendered:
            line_start = rendered.endswith("\n")
    return "".join(parts)


def _render_list(node: Node) -> str:
    ordered = node.attrs.get("ordered", False)
    start = node.attrs.get("start", 1)
    lines: list[str] = []

    for i, item in enumerate(node.children or ()):
        marker = f"{start + i}." if ordered else "-"
        indent = " " * (len(marker) + 1)
        body = "\n".join(render_block(child) for child in item.children or ())
        first, *rest = body.split("\n")
        lines.append(f"{marker} {first}".rstrip())
        lines.extend(indent + line if line else line for line in rest)

    return "\n".join(lines)


def _render_table(node: Node) -> str:
    lines: list[str] = []
    for i, row in enumerate(node.children or ()):
        cells = [render_inline(cell) for cell in row.children or ()]
        lines.append("| " + " | ".join(cells) + " |")
        if i == 0:
            lines.append("| " + " | ".join("---" for _ in cells) + " |")
    return "\n".join(lines)


def render_block(node: Node) -> str:
    """Render a block node and everything below it."""
    kind = node.type

    if kind == "root":
        return BLOCK_SEPARATOR.join(render_block(child) for child in node.children or ())
    if kind == "heading":
        return f"{'#' * node.attrs.get('depth', 1)} {_render_children(node, line_start=True)}"
    if kind == "blockquote":
        body = BLOCK_SEPARATOR.join(render_block(child) for child in node.children or ())
        return "\n".join(f"> {line}".rstrip() for line in body.split("\n"))
    if kind == "list":
        return _render_list(node)
    if kind == "table":
        return _render_table(node)
    if kind == "code":
        fence = "```"
        value = node.value or ""
        while fence in value:
            fence += "`"
        return f"{fence}{node.attrs.get('lang', '')}\n{value}\n{fence}"
    if kind == "thematicBreak":
        return "***"
    if kind == "html":
        return node.value or ""
    return render_inline(node, line_start=True)


class MarkdownStrategy(FormatStrategy):
    """Markdown via markdown-it-py, mapped onto mdast node types."""

    def __init__(self, preset: str | None = None, extensions: list[str] | None = None):
        self._preset = preset
        self._extensions = extensions

    @property
    def name(self) -> str:
        return "markdown"

    @property
    def extensions(self) -> list[str]:
        return [".md", ".markdown"]

    def _parser(self) -> MarkdownIt:
        cfg = get_config().markdown
        md = MarkdownIt(self._preset or cfg.preset)
        extensions = cfg.extensions if self._extensions is None else self._extensions
        if extensions:
            md.enable(extensions)
        return md

    def parse(self, content: str) -> Node:
        """
        Parse Markdown into an mdast-shaped tree.

        Structure:
        - root
          - paragraph / heading / list / blockquote / code / ...
            - text / emphasis / strong / link / inlineCode / ...
        """
        root = Node(type="root", children=[])

        if not content.strip():
            return root

        _build(self._parser().parse(content), root)
        return root

    def render(self, node: Node) -> str:
        """Serialize back to Markdown, blocks separated by blank lines."""
        return render_block(node).strip("\n")


# Register the strategy
registry.register(MarkdownStrategy())
