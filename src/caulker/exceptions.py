"""Exception protocol for Caulker analysis."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Mapping

if TYPE_CHECKING:
    from pathlib import Path

    from caulker.analysis.model import SourcePosition


class NeverThrown(RuntimeError):
    """Raised by never() when a statically unreachable path is reached.

    This signals a bug in Caulker itself, not a problem with the analyzed
    source, and is deliberately outside the CaulkerError hierarchy.
    """

    def __init__(self, message: str, *, env: Mapping[str, object] | None = None):
        super().__init__(message)
        self.env = dict(env or {})


class CaulkerError(Exception):
    """Base class for failures reported to the user."""


class LoadFailure(CaulkerError):
    def __init__(self, errors: list[str] | tuple[str, ...]):
        self.errors = tuple(errors)
        super().__init__(f"failed to load package: {', '.join(self.errors)}")


class ParseFailure(CaulkerError):
    def __init__(self, position: SourcePosition, detail: str):
        self.position = position
        self.detail = detail
        super().__init__(f"failed to parse file: {position}: {detail}")


class UnknownCheck(CaulkerError):
    def __init__(self, name: str, known: tuple[str, ...]):
        self.name = name
        super().__init__(f"unknown check {name!r} (known checks: {', '.join(known)})")


class ConfigFailure(CaulkerError):
    def __init__(self, path: Path, detail: str):
        self.path = path
        self.detail = detail
        super().__init__(f"failed to read config {path}: {detail}")


class BuildConstraintError(CaulkerError):
    def __init__(self, expression: str, detail: str):
        self.expression = expression
        self.detail = detail
        super().__init__(f"invalid //go:build line {expression!r}: {detail}")


class UnsupportedKind(str, Enum):
    NON_STRUCT_TYPE = "non-struct types"
    MAP_FIELD = "maps"
    PACKAGE_VARIABLE = "growable vars"
    UNKNOWN_DECLARATION = "unknown declarations"
    RECEIVER_SHAPE = "receiver types of this shape"


class UnsupportedConstruct(CaulkerError):
    """A source construct the analysis recognizes but cannot verify.

    Depending on the checker's policy it either aborts the whole check or is
    collected into the report so analysis can continue.
    """

    def __init__(self, kind: UnsupportedKind, position: SourcePosition, detail: str = ""):
        self.kind = kind
        self.position = position
        self.detail = detail
        message = f"{position}: {kind.value} not yet supported"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
