from __future__ import annotations

import logging
import sys
import textwrap
from pathlib import Path
from typing import Callable

ROOT = Path(__file__).resolve().parents[1]
for entry in (ROOT, ROOT / "src"):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))


import pytest


@pytest.fixture(autouse=True)
def _root_logging_scope():
    # The CLI reconfigures the root logger on every invocation.
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in before:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def write_go(tmp_path: Path) -> Callable[..., Path]:
    def _write(source: str, name: str = "store.go", directory: Path | None = None) -> Path:
        target_dir = directory if directory is not None else tmp_path
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / name
        path.write_text(textwrap.dedent(source).lstrip(), encoding="utf-8")
        return path

    return _write
