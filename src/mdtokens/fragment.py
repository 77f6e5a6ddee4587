"""
Fragment algebra.

A Fragment is the transient unit folded left-to-right while walking a
container: the nodes already resolved at this level plus the assignment
tokens still waiting for a neighbor on either side.

merge() binds waiting tokens the moment a concrete neighbor node exists and
otherwise carries them outward to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .dom import Node, attach_tokens, text

# Separator materialized between two fragments when either side had whitespace
SPACE = " "


@dataclass
class Fragment:
    """Resolved children plus unresolved before/after token buckets."""
    children: list[Node] = field(default_factory=list)
    before: list[str] = field(default_factory=list)  # bind to the node preceding this fragment
    after: list[str] = field(default_factory=list)  # bind to the node following this fragment
    space_before: bool = False
    space_after: bool = False

    @classmethod
    def of(cls, node: Node) -> Fragment:
        """Fragment holding a single resolved node."""
        return cls(children=[node])


def merge(a: Fragment, b: Fragment) -> Fragment:
    """
    Combine two adjacent fragments, `a` on the left.

    Non-commutative. Tokens of `b.before` bind to the last child of `a`,
    tokens of `a.after` bind to the first child of `b`; whichever side has no
    node keeps its bucket unresolved in the result.
    """
    left = a.children[-1] if a.children else None
    right = b.children[0] if b.children else None

    if left is None and right is None:
        return Fragment(
            children=[],
            before=a.before + b.before,
            after=a.after + b.after,
            space_before=a.space_before or b.space_before,
            space_after=a.space_after or b.space_after,
        )

    if left is None:
        attach_tokens(right, a.after)
        return Fragment(
            children=b.children,
            before=a.before + b.before,
            after=list(b.after),
            space_before=a.space_before or b.space_before,
            space_after=b.space_after,
        )

    if right is None:
        attach_tokens(left, b.before)
        return Fragment(
            children=a.children,
            before=list(a.before),
            after=a.after + b.after,
            space_before=a.space_before,
            space_after=a.space_after or b.space_after,
        )

    attach_tokens(left, b.before)
    attach_tokens(right, a.after)

    children = list(a.children)
    if a.space_after or b.space_before:
        children.append(text(SPACE))
    children.extend(b.children)

    return Fragment(
        children=children,
        before=list(a.before),
        after=list(b.after),
        space_before=a.space_before,
        space_after=b.space_after,
    )
