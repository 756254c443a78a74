from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from caulker.exceptions import UnsupportedConstruct


@dataclass(frozen=True)
class SourcePosition:
    path: Path
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column}"


@dataclass(frozen=True)
class Target:
    """A growable resource: a struct field, or a bare identifier.

    Targets carry no package qualifier, so comparing targets extracted from
    different packages is meaningless.
    """

    identity: str
    field_name: str | None = None
    # Declaration site of the field; mutation sites build targets without one.
    position: SourcePosition | None = field(default=None, compare=False)

    def equals(self, other: Target) -> bool:
        if self.identity != other.identity:
            return False
        if self.field_name is None and other.field_name is None:
            return True
        if self.field_name is None or other.field_name is None:
            return False
        return self.field_name == other.field_name

    def __str__(self) -> str:
        if self.field_name is None:
            return self.identity
        return f"{self.identity}.{self.field_name}"


class UpdateKind(str, Enum):
    UNKNOWN = "unknown"
    GROW = "grow"
    SHRINK = "shrink"


@dataclass(frozen=True)
class Update:
    target: Target
    kind: UpdateKind
    position: SourcePosition


@dataclass(frozen=True)
class Result:
    target: Target
    position: SourcePosition

    def __str__(self) -> str:
        return f"{self.position}: slice field {self.target} is grown but never shrunk"


@dataclass(frozen=True)
class CheckReport:
    results: tuple[Result, ...] = ()
    unsupported: tuple[UnsupportedConstruct, ...] = ()
