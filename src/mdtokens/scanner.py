"""
Token scanner.

Splits one text span into fragments: plain text, neutral token leaves
(`:name:`), and unresolved assignment tokens (`:^name:` binds to the node
before, `:name^:` binds to the node after). Whitespace around an assignment
token is swallowed and remembered as a space flag instead.
"""

from __future__ import annotations

import re
from collections.abc import Iterator

from .dom import TEXT, Node, text
from .fragment import Fragment

# Identifier body: no whitespace, no colon, no caret
TOKEN = r"[^\s:^]+"

TOKEN_PATTERN = re.compile(
    rf":(?P<neutral>{TOKEN}):"
    rf"|(?P<before_lead>\s*):\^(?P<before>{TOKEN}):(?P<before_trail>\s*)"
    rf"|(?P<after_lead>\s*):(?P<after>{TOKEN})\^:(?P<after_trail>\s*)"
)


def make_token(name: str) -> Node:
    """Materialized token leaf for a neutral `:name:` marker."""
    return Node(type=TEXT, value=f":{name}:", data={"token": name})


def scan_text(content: str) -> Iterator[Fragment]:
    """
    Yield fragments covering `content` left to right.

    Malformed markers (`::`, `:^:`, `:^a^:`) match nothing and stay as text.
    """
    cursor = 0

    for match in TOKEN_PATTERN.finditer(content):
        # Plain run up to the match
        if match.start() > cursor:
            yield Fragment.of(text(content[cursor:match.start()]))
        cursor = match.end()

        if match["neutral"] is not None:
            yield Fragment.of(make_token(match["neutral"]))
        elif match["before"] is not None:
            # Binds leftward, so only the trailing gap separates the neighbors
            space = bool(match["before_trail"])
            yield Fragment(before=[match["before"]], space_before=space, space_after=space)
        else:
            space = bool(match["after_lead"])
            yield Fragment(after=[match["after"]], space_before=space, space_after=space)

    # Trailing plain run
    if cursor < len(content):
        yield Fragment.of(text(content[cursor:]))
