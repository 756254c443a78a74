"""Go build constraints: ``//go:build`` expressions and GOOS/GOARCH file names."""

from __future__ import annotations

import platform
import re
import sys
from dataclasses import dataclass
from typing import Iterable

from caulker.exceptions import BuildConstraintError

KNOWN_OS: frozenset[str] = frozenset(
    {
        "aix", "android", "darwin", "dragonfly", "freebsd", "hurd", "illumos", "ios",
        "js", "linux", "nacl", "netbsd", "openbsd", "plan9", "solaris", "wasip1",
        "windows", "zos",
    }
)
UNIX_OS: frozenset[str] = frozenset(
    {
        "aix", "android", "darwin", "dragonfly", "freebsd", "hurd", "illumos", "ios",
        "linux", "netbsd", "openbsd", "solaris",
    }
)
KNOWN_ARCH: frozenset[str] = frozenset(
    {
        "386", "amd64", "amd64p32", "arm", "armbe", "arm64", "arm64be", "loong64",
        "mips", "mipsle", "mips64", "mips64le", "mips64p32", "mips64p32le", "ppc",
        "ppc64", "ppc64le", "riscv", "riscv64", "s390", "s390x", "sparc", "sparc64",
        "wasm",
    }
)

# GOOS values that also satisfy another GOOS tag.
_OS_IMPLIES = {"android": "linux", "illumos": "solaris", "ios": "darwin"}

_MACHINE_ARCH = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv7l": "arm",
    "armv6l": "arm",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
    "riscv64": "riscv64",
}

_TOKEN_RE = re.compile(r"\(|\)|!|&&|\|\||[A-Za-z0-9_.]+")
_OPERATORS = frozenset({"(", ")", "!", "&&", "||"})
_RELEASE_TAG_RE = re.compile(r"go1\.\d+")


@dataclass(frozen=True)
class BuildContext:
    goos: str
    goarch: str
    tags: frozenset[str] = frozenset()

    def satisfies(self, tag: str) -> bool:
        if tag in self.tags or tag == self.goos or tag == self.goarch:
            return True
        if _OS_IMPLIES.get(self.goos) == tag:
            return True
        if tag == "unix":
            return self.goos in UNIX_OS
        # Release tags are assumed satisfied by a current toolchain.
        return _RELEASE_TAG_RE.fullmatch(tag) is not None


def host_context(tags: Iterable[str] = ()) -> BuildContext:
    if sys.platform == "win32":
        goos = "windows"
    elif sys.platform.startswith("freebsd"):
        goos = "freebsd"
    else:
        goos = sys.platform
    machine = platform.machine().lower()
    return BuildContext(goos=goos, goarch=_MACHINE_ARCH.get(machine, machine), tags=frozenset(tags))


def _tokenize(expression: str) -> list[str]:
    tokens: list[str] = []
    pos = 0
    while pos < len(expression):
        if expression[pos].isspace():
            pos += 1
            continue
        match = _TOKEN_RE.match(expression, pos)
        if match is None:
            raise BuildConstraintError(expression, f"unexpected character {expression[pos]!r}")
        tokens.append(match.group())
        pos = match.end()
    return tokens


class _ConstraintParser:
    # expr := and ("||" and)* ; and := not ("&&" not)* ; not := "!" not | atom
    def __init__(self, expression: str, context: BuildContext) -> None:
        self.expression = expression
        self.tokens = _tokenize(expression)
        self.pos = 0
        self.context = context

    def _peek(self) -> str | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _take(self) -> str | None:
        token = self._peek()
        self.pos += 1
        return token

    def _fail(self, detail: str) -> BuildConstraintError:
        return BuildConstraintError(self.expression, detail)

    def parse(self) -> bool:
        if not self.tokens:
            raise self._fail("empty expression")
        value = self._or()
        token = self._peek()
        if token is not None:
            raise self._fail(f"unexpected token {token!r}")
        return value

    def _or(self) -> bool:
        value = self._and()
        while self._peek() == "||":
            self._take()
            rhs = self._and()
            value = value or rhs
        return value

    def _and(self) -> bool:
        value = self._not()
        while self._peek() == "&&":
            self._take()
            rhs = self._not()
            value = value and rhs
        return value

    def _not(self) -> bool:
        if self._peek() == "!":
            self._take()
            return not self._not()
        return self._atom()

    def _atom(self) -> bool:
        token = self._take()
        if token == "(":
            value = self._or()
            if self._take() != ")":
                raise self._fail("missing )")
            return value
        if token is None:
            raise self._fail("unexpected end of expression")
        if token in _OPERATORS:
            raise self._fail(f"unexpected token {token!r}")
        return self.context.satisfies(token)


def evaluate_constraint(expression: str, context: BuildContext) -> bool:
    """Evaluate the expression of a ``//go:build`` line against ``context``."""
    return _ConstraintParser(expression, context).parse()


def matches_file_name(name: str, context: BuildContext) -> bool:
    """Apply the implicit ``_GOOS``, ``_GOARCH`` and ``_GOOS_GOARCH`` file name constraints."""
    stem = name[: -len(".go")] if name.endswith(".go") else name
    if stem.endswith("_test"):
        stem = stem[: -len("_test")]
    _, sep, rest = stem.partition("_")
    if not sep:
        return True
    parts = rest.split("_")
    if len(parts) >= 2 and parts[-2] in KNOWN_OS and parts[-1] in KNOWN_ARCH:
        return context.satisfies(parts[-2]) and context.goarch == parts[-1]
    if parts[-1] in KNOWN_OS:
        return context.satisfies(parts[-1])
    if parts[-1] in KNOWN_ARCH:
        return context.goarch == parts[-1]
    return True
