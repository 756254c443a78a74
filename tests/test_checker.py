from __future__ import annotations

from pathlib import Path

import pytest

from caulker.analysis.checker import Caulker, Options, UnsupportedPolicy
from caulker.analysis.checks import CheckId
from caulker.analysis.mutations import OperationNames
from caulker.exceptions import LoadFailure, ParseFailure, UnsupportedConstruct, UnsupportedKind
from caulker.ingest.go_packages import GoPackage, load_packages

_STORE_HEADER = """
package store

import "slices"

type Store[T comparable] struct {
	data []T
}

func (s *Store[T]) Add(a T) {
	s.data = append(s.data, a)
}
"""

_REMOVE_WITH_SLICES = """
func (s *Store[T]) Remove(a T) {
	s.data = slices.DeleteFunc(s.data, func(v T) bool {
		return v == a
	})
}
"""

_REMOVE_IN_LOOP = """
func (s *Store[T]) Remove(a T) {
	for i, v := range s.data {
		if v == a {
			s.data = append(s.data[:i], s.data[i+1:]...)
			return
		}
	}
}
"""

_REMOVE_NOOP = """
func (s *Store[T]) Remove(a T) {}
"""


def _check(directory: Path, options: Options | None = None):
    caulker = Caulker(options)
    reports = [caulker.check(package) for package in load_packages(str(directory))]
    assert len(reports) == 1
    return reports[0]


def test_balanced_store_reports_nothing(tmp_path: Path, write_go) -> None:
    write_go(_STORE_HEADER + _REMOVE_WITH_SLICES)
    report = _check(tmp_path)
    assert report.results == ()
    assert report.unsupported == ()


def test_store_without_removal_reports_field(tmp_path: Path, write_go) -> None:
    path = write_go(_STORE_HEADER + _REMOVE_NOOP)
    report = _check(tmp_path)
    assert len(report.results) == 1
    result = report.results[0]
    assert str(result.target) == "Store.data"
    assert result.position.path == path
    assert (result.position.line, result.position.column) == (6, 2)
    assert str(result) == f"{path}:6:2: slice field Store.data is grown but never shrunk"


def test_removal_inside_loop_is_invisible(tmp_path: Path, write_go) -> None:
    write_go(_STORE_HEADER.replace('import "slices"\n', "") + _REMOVE_IN_LOOP)
    report = _check(tmp_path)
    assert [str(result.target) for result in report.results] == ["Store.data"]


def test_growth_inside_branch_only_is_not_reported(tmp_path: Path, write_go) -> None:
    write_go(
        """
        package store

        type Store struct {
        	data []int
        }

        func (s *Store) Add(a int) {
        	if a > 0 {
        		s.data = append(s.data, a)
        	}
        }
        """
    )
    assert _check(tmp_path).results == ()


def test_cross_type_same_field_name(tmp_path: Path, write_go) -> None:
    write_go(
        """
        package store

        import "slices"

        type Queue struct {
        	items []int
        }

        type Stack struct {
        	items []int
        }

        func (q *Queue) Push(v int) {
        	q.items = append(q.items, v)
        }

        func (q *Queue) Drop(i int) {
        	q.items = slices.Delete(q.items, i, i+1)
        }

        func (s *Stack) Push(v int) {
        	s.items = append(s.items, v)
        }
        """
    )
    report = _check(tmp_path)
    assert [str(result.target) for result in report.results] == ["Stack.items"]


def test_check_is_deterministic(tmp_path: Path, write_go) -> None:
    write_go(
        """
        package store

        type Store struct {
        	a []int
        	b []int
        	c []int
        }

        func (s *Store) Fill(v int) {
        	s.c = append(s.c, v)
        	s.a = append(s.a, v)
        	s.b = append(s.b, v)
        }
        """
    )
    first = _check(tmp_path)
    second = _check(tmp_path)
    assert first == second
    assert [result.target.field_name for result in first.results] == ["a", "b", "c"]


def test_correlation_never_spans_files(tmp_path: Path, write_go) -> None:
    write_go(
        """
        package store

        type Store struct {
        	data []int
        }

        func (s *Store) Add(v int) {
        	s.data = append(s.data, v)
        }
        """,
        name="a.go",
    )
    write_go(
        """
        package store

        import "slices"

        func (s *Store) Clear() {
        	s.data = slices.Delete(s.data, 0, len(s.data))
        }
        """,
        name="b.go",
    )
    report = _check(tmp_path)
    assert [str(result.target) for result in report.results] == ["Store.data"]


def test_package_variable_aborts_by_default(tmp_path: Path, write_go) -> None:
    write_go(
        """
        package notremoved

        var Data []string

        func Init() {
        	Data = append(Data, "foo")
        }
        """,
        name="main.go",
    )
    with pytest.raises(UnsupportedConstruct) as excinfo:
        _check(tmp_path)
    assert excinfo.value.kind is UnsupportedKind.PACKAGE_VARIABLE


def test_collect_policy_keeps_analyzing(tmp_path: Path, write_go) -> None:
    write_go(
        """
        package store

        var Default = &Store{}

        type Store struct {
        	data []int
        }

        func (s *Store) Add(v int) {
        	s.data = append(s.data, v)
        }
        """
    )
    report = _check(tmp_path, Options(unsupported_policy=UnsupportedPolicy.COLLECT))
    assert [str(result.target) for result in report.results] == ["Store.data"]
    assert [exc.kind for exc in report.unsupported] == [UnsupportedKind.PACKAGE_VARIABLE]


def test_disabled_and_unimplemented_checks(tmp_path: Path, write_go) -> None:
    write_go(_STORE_HEADER + _REMOVE_NOOP)
    assert _check(tmp_path, Options(enabled_checks=frozenset())).results == ()
    only_goroutines = Options(enabled_checks=frozenset({CheckId.GOROUTINES}))
    assert _check(tmp_path, only_goroutines).results == ()


def test_configured_operation_names(tmp_path: Path, write_go) -> None:
    write_go(
        _STORE_HEADER
        + """
func (s *Store[T]) Reset() {
	s.data = ring.Truncate(s.data)
}
"""
    )
    assert len(_check(tmp_path).results) == 1
    operations = OperationNames(shrink=("ring.Truncate",))
    assert _check(tmp_path, Options(operations=operations)).results == ()


def test_parse_failure_is_reported(tmp_path: Path, write_go) -> None:
    write_go(
        """
        package store

        type Store struct {
        	data []int

        func (s *Store) Add(v int) {
        	s.data = append(s.data, v)
        }
        """
    )
    with pytest.raises(ParseFailure) as excinfo:
        _check(tmp_path)
    assert str(excinfo.value).startswith("failed to parse file: ")


def test_package_with_loader_errors_is_rejected(tmp_path: Path) -> None:
    package = GoPackage(name="store", directory=tmp_path, files=(), errors=("boom",))
    with pytest.raises(LoadFailure) as excinfo:
        Caulker().check(package)
    assert str(excinfo.value) == "failed to load package: boom"
