from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable

from caulker.analysis.model import Result, Update, UpdateKind
from caulker.analysis.mutations import OperationNames, ReportUnsupported, updates_from_method
from caulker.analysis.reconcile import reconcile
from caulker.analysis.syntax import iter_named
from caulker.analysis.targets import extract_targets
from caulker.exceptions import UnknownCheck
from caulker.ingest.adapter_contract import ParsedFileUnit
from caulker.invariants import never


class CheckId(str, Enum):
    GOROUTINES = "goroutines"
    SLICES = "slices"


# Deterministic canonical order is part of the reporting contract.
# Sort key is lexical check-id text.
CHECK_IDS: tuple[CheckId, ...] = (
    CheckId.GOROUTINES,
    CheckId.SLICES,
)


@dataclass(frozen=True)
class CheckContext:
    unit: ParsedFileUnit
    operations: OperationNames
    report_unsupported: ReportUnsupported


CheckRunner = Callable[[CheckContext], list[Result]]


def run_slices_check(context: CheckContext) -> list[Result]:
    unit = context.unit
    targets = extract_targets(unit, report_unsupported=context.report_unsupported)
    updates: list[Update] = []
    for method in iter_named(unit.root, "method_declaration"):
        for update in updates_from_method(
            method,
            unit,
            operations=context.operations,
            report_unsupported=context.report_unsupported,
        ):
            if update.kind is UpdateKind.UNKNOWN:
                continue
            updates.append(update)
    return reconcile(targets, updates)


# None marks a check that is recognized but not implemented yet.
_UNORDERED_CHECK_RUNNERS: dict[CheckId, CheckRunner | None] = {
    CheckId.SLICES: run_slices_check,
    CheckId.GOROUTINES: None,
}


def check_runner_registry() -> dict[CheckId, CheckRunner | None]:
    return {
        check_id: _UNORDERED_CHECK_RUNNERS[check_id]
        for check_id in CHECK_IDS
        if check_id in _UNORDERED_CHECK_RUNNERS
    }


CHECK_RUNNER_REGISTRY: dict[CheckId, CheckRunner | None] = check_runner_registry()


def check_runner(check_id: CheckId) -> CheckRunner | None:
    if check_id not in CHECK_RUNNER_REGISTRY:
        never("check id has no registry entry", check_id=str(check_id))
    return CHECK_RUNNER_REGISTRY[check_id]


def implemented_check_ids() -> tuple[CheckId, ...]:
    return tuple(check_id for check_id, runner in CHECK_RUNNER_REGISTRY.items() if runner is not None)


def parse_check_id(name: str) -> CheckId:
    normalized = name.strip().lower()
    for check_id in CHECK_IDS:
        if check_id.value == normalized:
            return check_id
    raise UnknownCheck(name, tuple(check_id.value for check_id in CHECK_IDS))


def parse_check_ids(names: Iterable[str]) -> frozenset[CheckId]:
    return frozenset(parse_check_id(name) for name in names)
