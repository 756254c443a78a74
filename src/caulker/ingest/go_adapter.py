from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import tree_sitter_go as tsgo
from tree_sitter import Language, Node, Parser

from caulker.analysis.syntax import first_error_node, node_position, node_text
from caulker.exceptions import LoadFailure, ParseFailure
from caulker.ingest.adapter_contract import LanguageAdapter, ParsedFileUnit

logger = logging.getLogger(__name__)

GO_LANGUAGE = Language(tsgo.language())
_parser = Parser(GO_LANGUAGE)

_GO_BUILD_DIRECTIVE = "//go:build"


@dataclass(frozen=True)
class FileHeader:
    package: str | None
    build_constraint: str | None = None


def _package_identifier(clause: Node, source: bytes) -> str | None:
    for child in clause.named_children:
        if child.type in {"package_identifier", "identifier"}:
            return node_text(child, source)
    return None


def read_file_header(source: bytes) -> FileHeader:
    """Package name and ``//go:build`` expression of a Go file.

    Only comments ahead of the package clause can carry the build line.
    Syntax errors elsewhere in the file are left for ``parse_go_source``.
    """
    root = _parser.parse(source).root_node
    constraint: str | None = None
    for child in root.named_children:
        if child.type == "package_clause":
            return FileHeader(_package_identifier(child, source), constraint)
        if child.type != "comment":
            break
        words = node_text(child, source).split(None, 1)
        if constraint is None and words and words[0] == _GO_BUILD_DIRECTIVE:
            constraint = words[1].strip() if len(words) > 1 else ""
    return FileHeader(None, constraint)


def parse_go_source(source: bytes, path: Path) -> ParsedFileUnit:
    tree = _parser.parse(source)
    error = first_error_node(tree.root_node)
    if error is not None:
        detail = f"missing {error.type}" if error.is_missing else "syntax error"
        raise ParseFailure(node_position(error, path), detail)
    return ParsedFileUnit(path=path, tree=tree, source=source)


class GoAdapter(LanguageAdapter):
    language_id = "go"
    file_extensions = (".go",)

    def parse_file(self, path: Path) -> ParsedFileUnit:
        logger.debug("parsing %s", path)
        try:
            source = path.read_bytes()
        except OSError as exc:
            raise LoadFailure([f"{path}: {exc.strerror or exc}"]) from exc
        return parse_go_source(source, path)

    def parse_files(self, paths: list[Path]) -> list[ParsedFileUnit]:
        return [self.parse_file(path) for path in paths]
