"""
Base format interface and registry.

Each format strategy turns raw content into a document tree and serializes
a tree back out. The registry manages format detection and selection.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from ..dom import Node


class FormatStrategy(ABC):
    """Base class for document format handlers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Format name used by --type and --output."""
        ...

    @property
    @abstractmethod
    def extensions(self) -> list[str]:
        """File extensions this format handles (e.g., ['.md', '.markdown'])."""
        ...

    def detect(self, content: str) -> bool:
        """
        Magic detection: returns True if content looks like this format.
        Default implementation returns False (rely on extension only).
        """
        return False

    @abstractmethod
    def parse(self, content: str) -> Node:
        """
        Parse content into a tree of Nodes.
        Returns the root container of the tree.
        """
        ...

    @abstractmethod
    def render(self, node: Node) -> str:
        """Serialize a tree back into this format."""
        ...


class FormatRegistry:
    """
    Format strategies keyed by name and by file extension.

    Input selection goes through `detect`; `--type` and `--output` values
    go through `get`, which accepts a name or an extension.
    """

    def __init__(self):
        self._strategies: dict[str, FormatStrategy] = {}
        self._by_extension: dict[str, FormatStrategy] = {}

    def register(self, strategy: FormatStrategy) -> None:
        self._strategies[strategy.name] = strategy
        for ext in strategy.extensions:
            # Earlier registrations keep their extensions
            self._by_extension.setdefault(ext.lower(), strategy)

    def get(self, key: str) -> FormatStrategy | None:
        """Look up by format name, then by extension (leading dot optional)."""
        if key in self._strategies:
            return self._strategies[key]
        return self._by_extension.get("." + key.lstrip(".").lower())

    def detect(self, content: str, filename: str | None = None) -> FormatStrategy | None:
        """
        Pick a strategy from the filename's extension, else from the content.
        Returns None when neither decides, leaving the fallback to the caller.
        """
        if filename:
            strategy = self._by_extension.get(Path(filename).suffix.lower())
            if strategy is not None:
                return strategy

        return next((s for s in self._strategies.values() if s.detect(content)), None)


# Global registry instance
registry = FormatRegistry()
