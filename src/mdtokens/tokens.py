"""
Token tree transform for mdtokens.

Implements:
- Depth-first fold of every container's children with the fragment algebra
- Dissolution of emptied block wrappers (paragraphs by default) so their
  pending tokens reach sibling blocks or the root
- Attachment of leftover tokens onto the container itself

The transform mutates the tree in place and must run once per tree: text
leaves that already carry tokens are rejected.
"""

from __future__ import annotations

import logging
from collections.abc import Collection

from .dom import Node, attach_tokens
from .fragment import Fragment, merge
from .scanner import scan_text

logger = logging.getLogger(__name__)

# Minimal block wrapper dissolved when emptied
COLLAPSIBLE_TYPES = ("paragraph",)


class PreconditionViolation(ValueError):
    """Raised when a tree has already been through the token transform."""


def is_token(node: Node) -> bool:
    """True if the node is a materialized `:name:` token leaf."""
    return node.is_text and node.token is not None


def _check_untouched(node: Node) -> None:
    if node.tokens:
        raise PreconditionViolation(
            f"Text node already has tokens {node.tokens!r}; tokens can only be parsed once"
        )


def _fold(node: Node, collapsible: Collection[str]) -> Fragment:
    """Fold all children of `node` left to right into one fragment."""
    state = Fragment()

    for child in node.children or ():
        if child.is_parent:
            state = merge(state, _parse_node(child, collapsible))
        elif child.is_text:
            _check_untouched(child)
            for fragment in scan_text(child.value or ""):
                state = merge(state, fragment)
        else:
            # Any other leaf (inline code, images, html) is opaque
            state = merge(state, Fragment.of(child))

    return state


def _attach(node: Node, state: Fragment) -> Fragment:
    """Keep the node: adopt the folded children and any tokens left over."""
    node.children = state.children
    attach_tokens(node, state.before + state.after)
    return Fragment.of(node)


def _parse_node(node: Node, collapsible: Collection[str]) -> Fragment:
    state = _fold(node, collapsible)

    # Only decidable once every child has been folded
    if node.type in collapsible and not state.children:
        logger.debug(
            "Dissolving empty %s (before=%s, after=%s)", node.type, state.before, state.after
        )
        return state

    return _attach(node, state)


def parse_tokens(root: Node, collapsible_types: Collection[str] = COLLAPSIBLE_TYPES) -> Node:
    """
    Recognize tokens in all text of the tree and attach them to nodes.

    Returns the same, mutated root. The root is never dissolved: tokens with
    no neighbor at any level end up on the root itself. Pure in-memory;
    callers wanting configured block types pass them explicitly.

    Raises:
        TypeError: root is a leaf
        PreconditionViolation: a text leaf already carries tokens
    """
    if not root.is_parent:
        raise TypeError(f"Root must be a container node, got leaf of type {root.type!r}")

    collapsible = frozenset(collapsible_types)

    state = _fold(root, collapsible)
    if state.before or state.after:
        logger.debug("Attaching unbound tokens %s to %s", state.before + state.after, root.type)
    _attach(root, state)

    return root


def collect_tokens(root: Node) -> list[tuple[str, list[str]]]:
    """(path, tokens) for every node carrying attached tokens, depth-first."""
    return [(path, list(node.tokens)) for path, node in root.walk() if node.tokens]


def token_markers(root: Node) -> list[tuple[str, str]]:
    """(path, identifier) for every materialized token leaf, depth-first."""
    return [(path, node.token) for path, node in root.walk() if is_token(node)]
