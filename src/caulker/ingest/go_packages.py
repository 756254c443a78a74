"""Resolve a user-supplied path pattern into Go packages."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable

from caulker.exceptions import BuildConstraintError, LoadFailure
from caulker.ingest.build_constraints import (
    BuildContext,
    evaluate_constraint,
    host_context,
    matches_file_name,
)
from caulker.ingest.go_adapter import read_file_header

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDE_DIRS: frozenset[str] = frozenset({"vendor", "testdata"})
RECURSIVE_SUFFIX = "..."


@dataclass(frozen=True)
class GoPackage:
    name: str
    directory: Path
    files: tuple[Path, ...]
    errors: tuple[str, ...] = ()
    ignored: tuple[Path, ...] = ()


def _is_go_source(name: str) -> bool:
    if name.startswith(".") or name.startswith("_"):
        return False
    return name.endswith(".go") and not name.endswith("_test.go")


def _is_ignored_dir(name: str, exclude_dirs: Iterable[str]) -> bool:
    return name in exclude_dirs or name.startswith(".") or name.startswith("_")


def _package_from_files(directory: Path, files: list[Path], context: BuildContext) -> GoPackage:
    errors: list[str] = []
    selected: list[Path] = []
    ignored: list[Path] = []
    first_file_by_name: dict[str, Path] = {}
    for path in files:
        if not matches_file_name(path.name, context):
            ignored.append(path)
            continue
        try:
            header = read_file_header(path.read_bytes())
        except OSError as exc:
            errors.append(f"{path}: {exc.strerror or exc}")
            continue
        if header.build_constraint is not None:
            try:
                included = evaluate_constraint(header.build_constraint, context)
            except BuildConstraintError as exc:
                errors.append(f"{path}: {exc}")
                continue
            if not included:
                logger.debug("%s: excluded by //go:build %s", path, header.build_constraint)
                ignored.append(path)
                continue
        selected.append(path)
        if header.package is None:
            errors.append(f"{path}: expected package clause")
            continue
        first_file_by_name.setdefault(header.package, path)
    if len(first_file_by_name) > 1:
        found = " and ".join(f"{name} ({path.name})" for name, path in first_file_by_name.items())
        errors.append(f"found packages {found} in {directory}")
    name = next(iter(first_file_by_name), directory.name)
    return GoPackage(
        name=name,
        directory=directory,
        files=tuple(selected),
        errors=tuple(errors),
        ignored=tuple(ignored),
    )


def _excluded_everything(package: GoPackage) -> bool:
    return bool(package.ignored) and not package.files and not package.errors


def _require_files(package: GoPackage) -> GoPackage:
    if _excluded_everything(package):
        return replace(
            package,
            errors=(f"build constraints exclude all Go files in {package.directory}",),
        )
    return package


def _package_for_dir(directory: Path, context: BuildContext) -> GoPackage:
    files = sorted(
        entry for entry in directory.iterdir() if entry.is_file() and _is_go_source(entry.name)
    )
    if not files:
        return GoPackage(
            name=directory.name,
            directory=directory,
            files=(),
            errors=(f"no Go files in {directory}",),
        )
    return _package_from_files(directory, files, context)


def _walk_packages(root: Path, exclude_dirs: Iterable[str], context: BuildContext) -> list[GoPackage]:
    packages: list[GoPackage] = []
    for current, dirnames, filenames in os.walk(root, topdown=True):
        dirnames[:] = sorted(d for d in dirnames if not _is_ignored_dir(d, exclude_dirs))
        if not any(_is_go_source(name) for name in filenames):
            continue
        package = _package_for_dir(Path(current), context)
        if _excluded_everything(package):
            logger.debug("skipping %s: build constraints exclude all Go files", current)
            continue
        packages.append(package)
    return packages


def resolve_packages(
    pattern: str,
    *,
    exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS,
    context: BuildContext | None = None,
) -> list[GoPackage]:
    """Resolve ``pattern`` without raising; problems are recorded on each package.

    Accepted forms are a single ``.go`` file, a package directory, or
    ``dir/...`` for every package below ``dir``. Files are selected with
    ``context`` (the host GOOS/GOARCH by default) the way ``go build`` does.
    """
    if context is None:
        context = host_context()
    if pattern == RECURSIVE_SUFFIX or pattern.endswith("/" + RECURSIVE_SUFFIX):
        base = pattern[: -len(RECURSIVE_SUFFIX)].rstrip("/") or "."
        root = Path(base)
        if not root.is_dir():
            return [
                GoPackage(
                    name=root.name,
                    directory=root,
                    files=(),
                    errors=(f"directory not found: {root}",),
                )
            ]
        return _walk_packages(root, exclude_dirs, context)

    path = Path(pattern)
    if path.is_dir():
        return [_require_files(_package_for_dir(path, context))]
    if not path.exists():
        return [
            GoPackage(
                name=path.stem,
                directory=path.parent,
                files=(),
                errors=(f"{path}: no such file or directory",),
            )
        ]
    if path.suffix != ".go":
        return [
            GoPackage(
                name=path.stem,
                directory=path.parent,
                files=(),
                errors=(f"{path}: not a Go source file",),
            )
        ]
    return [_require_files(_package_from_files(path.parent, [path], context))]


def load_packages(
    pattern: str,
    *,
    exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS,
    context: BuildContext | None = None,
) -> list[GoPackage]:
    packages = resolve_packages(pattern, exclude_dirs=exclude_dirs, context=context)
    if not packages:
        raise LoadFailure([f"pattern {pattern!r} matched no packages"])
    errors = [error for package in packages for error in package.errors]
    if errors:
        raise LoadFailure(errors)
    for package in packages:
        logger.debug(
            "loaded package %s from %s (%d files, %d excluded)",
            package.name,
            package.directory,
            len(package.files),
            len(package.ignored),
        )
    return packages
