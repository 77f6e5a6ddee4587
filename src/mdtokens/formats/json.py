"""
JSON format strategy.

Reads and writes mdast-compatible JSON trees, so documents parsed by any
external Markdown toolchain can be run through the token transform.
Keys other than type/value/children/data are kept as node attrs;
source positions are dropped.
"""

from __future__ import annotations

import json
from typing import Any

from ..config import get_config
from ..dom import Node
from .base import FormatStrategy, registry

RESERVED_KEYS = {"type", "value", "children", "data", "position"}


def node_from_dict(obj: Any) -> Node:
    """Build a Node tree from a decoded mdast object."""
    if not isinstance(obj, dict) or "type" not in obj:
        raise ValueError(f"Expected an mdast node object with a 'type', got {str(obj)[:50]!r}")

    children = obj.get("children")
    if children is not None and not isinstance(children, list):
        raise ValueError(f"'children' of {obj['type']!r} node must be a list")

    return Node(
        type=str(obj["type"]),
        value=obj.get("value"),
        children=[node_from_dict(c) for c in children] if children is not None else None,
        attrs={k: v for k, v in obj.items() if k not in RESERVED_KEYS},
        data=dict(obj.get("data") or {}),
    )


def node_to_dict(node: Node) -> dict[str, Any]:
    """Inverse of node_from_dict; omits empty data."""
    result: dict[str, Any] = {"type": node.type, **node.attrs}
    if node.value is not None:
        result["value"] = node.value
    if node.children is not None:
        result["children"] = [node_to_dict(c) for c in node.children]
    if node.data:
        result["data"] = node.data
    return result


class JSONStrategy(FormatStrategy):
    """mdast JSON parser and serializer."""

    def __init__(self, indent: int | None = None):
        self._indent = indent

    @property
    def name(self) -> str:
        return "json"

    @property
    def extensions(self) -> list[str]:
        return [".json"]

    def detect(self, content: str) -> bool:
        """An mdast document is a single JSON object."""
        return content.lstrip().startswith("{")

    def parse(self, content: str) -> Node:
        """Parse JSON into tree of nodes. Raises ValueError on malformed input."""
        return node_from_dict(json.loads(content))

    def render(self, node: Node) -> str:
        return json.dumps(
            node_to_dict(node),
            indent=self._indent if self._indent is not None else get_config().output.indent,
            ensure_ascii=False,
        )


registry.register(JSONStrategy())
