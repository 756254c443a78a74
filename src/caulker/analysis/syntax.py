"""Helpers over tree-sitter Go syntax nodes."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

from tree_sitter import Node

from caulker.analysis.model import SourcePosition


def node_text(node: Node, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def compact_text(node: Node, source: bytes) -> str:
    """Node text with all whitespace removed, e.g. ``slices . Delete`` -> ``slices.Delete``."""
    return "".join(node_text(node, source).split())


def node_position(node: Node, path: Path) -> SourcePosition:
    row, column = node.start_point
    return SourcePosition(path=path, line=row + 1, column=column + 1)


def first_error_node(node: Node) -> Node | None:
    if node.type == "ERROR" or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = first_error_node(child)
        if found is not None:
            return found
    return node


def iter_named(node: Node, kind: str) -> Iterator[Node]:
    for child in node.named_children:
        if child.type == kind:
            yield child


def body_statements(block: Node) -> list[Node]:
    """Top-level statements of a block, without descending into nested scopes.

    Newer grammar releases wrap the statements in a ``statement_list`` node,
    older ones put them directly under the block.
    """
    statements: list[Node] = []
    for child in block.named_children:
        if child.type == "statement_list":
            statements.extend(c for c in child.named_children if c.type != "comment")
        elif child.type != "comment":
            statements.append(child)
    return statements
