from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer

from caulker import config as caulker_config
from caulker.analysis.checker import Caulker, Options, UnsupportedPolicy
from caulker.analysis.checks import CHECK_IDS, implemented_check_ids, parse_check_ids
from caulker.exceptions import CaulkerError
from caulker.ingest.build_constraints import BuildContext, host_context
from caulker.ingest.go_packages import load_packages

app = typer.Typer(add_completion=False)

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _split_entries(entries: List[str]) -> list[str]:
    # --disable accepts "a,b" as well as "a b".
    merged: list[str] = []
    for entry in entries:
        merged.extend(part.strip() for part in entry.replace(",", " ").split() if part.strip())
    return merged


def _log_level(*, verbose: bool, silent: bool) -> int:
    if silent:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.INFO


def _configure_logging(*, verbose: bool, silent: bool) -> None:
    logging.basicConfig(
        level=_log_level(verbose=verbose, silent=silent),
        stream=sys.stdout,
        format=_LOG_FORMAT,
        force=True,
    )


def build_options(
    data: caulker_config.TomlTable,
    *,
    disable: List[str],
    grow: List[str],
    shrink: List[str],
    keep_going: bool | None,
) -> Options:
    disabled = [
        *caulker_config.disabled_check_names(caulker_config.checks_defaults(data)),
        *_split_entries(disable),
    ]
    enabled = frozenset(CHECK_IDS) - parse_check_ids(disabled)
    operations = caulker_config.operation_names(
        caulker_config.slices_defaults(data),
        extra_shrink=_split_entries(shrink),
        extra_grow=_split_entries(grow),
    )
    if keep_going is None:
        keep_going = caulker_config.keep_going(caulker_config.analysis_defaults(data))
    return Options(
        logger=logging.getLogger("caulker"),
        enabled_checks=enabled,
        operations=operations,
        unsupported_policy=UnsupportedPolicy.COLLECT if keep_going else UnsupportedPolicy.ABORT,
    )


def build_context(data: caulker_config.TomlTable, *, tags: List[str]) -> BuildContext:
    return host_context(
        [
            *caulker_config.build_tags(caulker_config.build_defaults(data)),
            *_split_entries(tags),
        ]
    )


def _disable_help() -> str:
    implemented = ", ".join(check_id.value for check_id in implemented_check_ids())
    known = ", ".join(check_id.value for check_id in CHECK_IDS)
    return f"Disable a specific check (known: {known}; implemented: {implemented})."


def run(pattern: str, options: Options, *, context: BuildContext | None = None) -> None:
    caulker = Caulker(options)
    packages = load_packages(pattern, context=context)
    for package in packages:
        try:
            report = caulker.check(package)
        except CaulkerError as exc:
            raise CaulkerError(f"encountered error while checking package: {exc}") from exc
        for result in report.results:
            typer.echo(str(result))


@app.command()
def check(
    ctx: typer.Context,
    paths: List[str] = typer.Argument(None, metavar="PATH", show_default=False),
    disable: Optional[List[str]] = typer.Option(
        None,
        "--disable",
        help=_disable_help(),
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging."),
    silent: bool = typer.Option(False, "--silent", help="Disable all logging except for errors."),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to caulker.toml."),
    keep_going: Optional[bool] = typer.Option(
        None,
        "--keep-going/--no-keep-going",
        help="Report unsupported constructs as warnings instead of stopping.",
    ),
    grow: Optional[List[str]] = typer.Option(None, "--grow", help="Extra grow operation name."),
    shrink: Optional[List[str]] = typer.Option(None, "--shrink", help="Extra shrink operation name."),
    tags: Optional[List[str]] = typer.Option(
        None, "--tags", help="Extra build tags satisfied when selecting files."
    ),
) -> None:
    """Report slice fields that are grown but never shrunk.

    PATH is a Go file, a package directory, or ``dir/...`` for every package
    below ``dir``. Fatal conditions are printed as ``Error: <message>`` on
    standard output; the exit status is not changed.
    """
    if paths and len(paths) > 1:
        typer.echo(f"Error: unexpected arguments: [{' '.join(paths)}]")
        typer.echo(ctx.get_usage())
        return
    pattern = paths[0] if paths else "."
    _configure_logging(verbose=verbose, silent=silent)
    try:
        data = caulker_config.load_config(config_path=config)
        options = build_options(
            data,
            disable=disable or [],
            grow=grow or [],
            shrink=shrink or [],
            keep_going=keep_going,
        )
        run(pattern, options, context=build_context(data, tags=tags or []))
    except CaulkerError as exc:
        typer.echo(f"Error: {exc}")


def main() -> None:
    app()
