"""
DOM - Document Object Model for mdtokens

Generic mdast-shaped tree. A node is either a container (children is a list)
or a leaf (children is None). Leaves carry a string value or an opaque
payload in attrs.

Key invariant: the `tokens` entry of a node's data only ever grows during a
traversal. It is never reordered or deduplicated.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

TEXT = "text"


@dataclass
class Node:
    """A node in the document tree."""
    type: str
    value: str | None = None
    children: list[Node] | None = None
    attrs: dict[str, Any] = field(default_factory=dict)
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def is_parent(self) -> bool:
        """Containers have a child list, even an empty one."""
        return self.children is not None

    @property
    def is_text(self) -> bool:
        return self.type == TEXT and self.children is None

    @property
    def tokens(self) -> list[str] | None:
        """Tokens attached to this node, or None if never attached."""
        return self.data.get("tokens")

    @property
    def token(self) -> str | None:
        """Identifier of a materialized token leaf."""
        return self.data.get("token")

    def depth_first(self) -> Iterator[Node]:
        """Traverse tree depth-first, yielding self then children."""
        yield self
        for child in self.children or ():
            yield from child.depth_first()

    def walk(self, path: str | None = None) -> Iterator[tuple[str, Node]]:
        """Depth-first traversal yielding (path, node) pairs.

        Paths are slash-joined `type[index]` segments, the root is just its type.
        """
        path = path or self.type
        yield path, self
        for i, child in enumerate(self.children or ()):
            yield from child.walk(f"{path}/{child.type}[{i}]")

    def add_child(self, child: Node) -> Node:
        """Add a child node and return it for chaining."""
        if self.children is None:
            raise ValueError(f"Cannot add children to leaf node of type {self.type!r}")
        self.children.append(child)
        return child


def text(value: str) -> Node:
    """Build a plain text leaf."""
    return Node(type=TEXT, value=value)


def attach_tokens(node: Node, tokens: list[str]) -> None:
    """Append token identifiers to a node's metadata, in order."""
    if not tokens:
        return
    node.data.setdefault("tokens", []).extend(tokens)
