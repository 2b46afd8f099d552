"""Pre-order traversal of op trees."""

from __future__ import annotations

from typing import Callable

from ..optree import Node

Visitor = Callable[[Node, int], None]


class TreeWalker:
    """Visit every op of a tree exactly once, parents before children.

    Children are visited left to right. The walk uses an explicit stack, so
    deep trees do not hit the interpreter's recursion limit, and it never
    modifies the tree.
    """

    def __init__(self, visit: Visitor):
        self.visit = visit
        self.visited = 0

    def walk(self, root: Node) -> int:
        """Walk ``root``'s subtree and return the number of ops visited."""
        count = 0
        stack: list[tuple[Node, int]] = [(root, 0)]
        while stack:
            node, depth = stack.pop()
            self.visit(node, depth)
            count += 1
            stack.extend((child, depth + 1) for child in reversed(node.children))
        self.visited += count
        return count
