"""Invariant markers for Caulker analysis."""

from __future__ import annotations

from typing import NoReturn

from caulker.exceptions import NeverThrown


def never(reason: str = "", **env: object) -> NoReturn:
    """Mark a code path as intentionally unreachable.

    Reaching it means the syntax tree had a shape the analysis assumed
    impossible. The env payload is attached to the exception for diagnostics.
    """
    raise NeverThrown(reason or "never() marker reached", env=env)
