from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from caulker.analysis.checks import CHECK_IDS, CheckContext, CheckId, check_runner, implemented_check_ids
from caulker.analysis.model import CheckReport, Result
from caulker.analysis.mutations import OperationNames
from caulker.exceptions import LoadFailure, UnsupportedConstruct
from caulker.ingest.adapter_contract import LanguageAdapter
from caulker.ingest.go_adapter import GoAdapter
from caulker.ingest.go_packages import GoPackage


class UnsupportedPolicy(str, Enum):
    ABORT = "abort"
    COLLECT = "collect"


@dataclass(frozen=True)
class Options:
    logger: logging.Logger | None = None
    enabled_checks: frozenset[CheckId] = frozenset(CHECK_IDS)
    operations: OperationNames = field(default_factory=OperationNames)
    unsupported_policy: UnsupportedPolicy = UnsupportedPolicy.ABORT
    adapter: LanguageAdapter | None = None


class Caulker:
    def __init__(self, options: Options | None = None) -> None:
        self.options = options if options is not None else Options()
        self.logger = self.options.logger or logging.getLogger("caulker")
        self.adapter = self.options.adapter or GoAdapter()

    def _runnable_checks(self) -> list[CheckId]:
        implemented = implemented_check_ids()
        runnable: list[CheckId] = []
        for check_id in CHECK_IDS:
            if check_id not in self.options.enabled_checks:
                continue
            if check_id not in implemented:
                self.logger.debug("check %s is not implemented yet; skipping", check_id.value)
                continue
            runnable.append(check_id)
        return runnable

    def check(self, package: GoPackage) -> CheckReport:
        """Run every enabled check over each file of ``package``.

        Files are analyzed one at a time and targets are only correlated with
        updates from the same file. Under ``UnsupportedPolicy.ABORT`` the first
        unsupported construct propagates; under ``COLLECT`` it is recorded in
        the report and analysis continues past it.
        """
        if package.errors:
            raise LoadFailure(package.errors)
        results: list[Result] = []
        unsupported: list[UnsupportedConstruct] = []

        def _report_unsupported(exc: UnsupportedConstruct) -> None:
            if self.options.unsupported_policy is UnsupportedPolicy.ABORT:
                raise exc
            self.logger.warning("%s", exc)
            unsupported.append(exc)

        checks = self._runnable_checks()
        self.logger.debug("checking package %s (%d files)", package.name, len(package.files))
        for path in package.files:
            unit = self.adapter.parse_file(path)
            context = CheckContext(
                unit=unit,
                operations=self.options.operations,
                report_unsupported=_report_unsupported,
            )
            for check_id in checks:
                runner = check_runner(check_id)
                if runner is None:
                    continue
                found = runner(context)
                self.logger.debug("%s: %s check found %d result(s)", path, check_id.value, len(found))
                results.extend(found)
        return CheckReport(results=tuple(results), unsupported=tuple(unsupported))
