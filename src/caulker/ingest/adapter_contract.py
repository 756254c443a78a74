from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from tree_sitter import Node, Tree


@dataclass(frozen=True)
class ParsedFileUnit:
    path: Path
    tree: Tree
    source: bytes

    @property
    def root(self) -> Node:
        return self.tree.root_node


@runtime_checkable
class LanguageAdapter(Protocol):
    language_id: str
    file_extensions: tuple[str, ...]

    def parse_file(self, path: Path) -> ParsedFileUnit: ...

    def parse_files(self, paths: list[Path]) -> list[ParsedFileUnit]: ...
