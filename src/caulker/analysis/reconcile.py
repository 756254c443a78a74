from __future__ import annotations

from typing import Iterable, Sequence

from caulker.analysis.model import Result, Target, Update, UpdateKind
from caulker.invariants import never


def _has_update(updates: Iterable[Update], target: Target, kind: UpdateKind) -> bool:
    return any(update.kind == kind and update.target.equals(target) for update in updates)


def reconcile(targets: Sequence[Target], updates: Sequence[Update]) -> list[Result]:
    """Report every target that is grown at least once and never shrunk.

    Matching goes through ``Target.equals`` only. Output follows target order.
    """
    results: list[Result] = []
    for target in targets:
        grown = _has_update(updates, target, UpdateKind.GROW)
        shrunk = _has_update(updates, target, UpdateKind.SHRINK)
        if not grown or shrunk:
            continue
        if target.position is None:
            never("reported target has no declaration position", target=str(target))
        results.append(Result(target=target, position=target.position))
    return results
