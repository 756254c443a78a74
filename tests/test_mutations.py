from __future__ import annotations

import pytest

from caulker.analysis.model import Target, UpdateKind
from caulker.analysis.mutations import (
    DEFAULT_GROW_OPERATIONS,
    DEFAULT_SHRINK_OPERATIONS,
    OperationNames,
    updates_from_method,
)
from caulker.exceptions import UnsupportedConstruct, UnsupportedKind
from tests.go_helpers import UnsupportedSink, methods, parse_unit, raise_unsupported


def _updates(source: str, operations: OperationNames | None = None):
    unit = parse_unit(source)
    found = []
    for method in methods(unit):
        found.extend(
            updates_from_method(
                method,
                unit,
                operations=operations or OperationNames(),
                report_unsupported=raise_unsupported,
            )
        )
    return found


def test_classify_default_names() -> None:
    names = OperationNames()
    assert names.classify("append") is UpdateKind.GROW
    assert names.classify("slices.Grow") is UpdateKind.GROW
    assert names.classify("slices.Insert") is UpdateKind.GROW
    assert names.classify("slices.Delete") is UpdateKind.SHRINK
    assert names.classify("slices.DeleteFunc") is UpdateKind.SHRINK
    assert names.classify("slices.Clip") is UpdateKind.SHRINK
    assert names.classify("copy") is UpdateKind.UNKNOWN
    assert names.classify("slices.Sort") is UpdateKind.UNKNOWN


@pytest.mark.parametrize("name", DEFAULT_SHRINK_OPERATIONS + DEFAULT_GROW_OPERATIONS)
@pytest.mark.parametrize("suffix", ["", "Func", "At", "[[]int]", "X"])
def test_classify_is_stable_under_prefix_extension(name: str, suffix: str) -> None:
    names = OperationNames()
    assert names.classify(name + suffix) is names.classify(name)


def test_classify_prefers_shrink_when_both_lists_match() -> None:
    names = OperationNames(shrink=("lib.Resize",), grow=("lib.Resize",))
    assert names.classify("lib.Resize") is UpdateKind.SHRINK
    assert names.classify("lib.ResizeTo") is UpdateKind.SHRINK


def test_classify_prefix_leniency_matches_longer_unrelated_names() -> None:
    assert OperationNames().classify("appendix") is UpdateKind.GROW


def test_grow_and_shrink_updates_from_methods() -> None:
    updates = _updates(
        """
        package store

        import "slices"

        type Store[T comparable] struct {
        	data []T
        }

        func (s *Store[T]) Add(a T) {
        	s.data = append(s.data, a)
        }

        func (s *Store[T]) Remove(a T) {
        	s.data = slices.DeleteFunc(s.data, func(v T) bool {
        		return v == a
        	})
        }
        """
    )
    assert [update.kind for update in updates] == [UpdateKind.GROW, UpdateKind.SHRINK]
    assert all(update.target == Target("Store", "data") for update in updates)
    assert updates[0].position.line == 10
    # Position points at the assignment operator.
    assert updates[0].position.column == len("\ts.data ") + 1


def test_non_call_right_hand_side_is_unknown() -> None:
    updates = _updates(
        """
        package store

        type Store struct {
        	data []int
        }

        func (s *Store) Reset() {
        	s.data = nil
        }

        func (s *Store) Head() {
        	s.data = s.data[:1]
        }
        """
    )
    assert [update.kind for update in updates] == [UpdateKind.UNKNOWN, UpdateKind.UNKNOWN]


def test_unmatched_call_is_unknown() -> None:
    updates = _updates(
        """
        package store

        type Store struct {
        	data []int
        }

        func (s *Store) Load() {
        	s.data = load()
        }
        """
    )
    assert len(updates) == 1
    assert updates[0].kind is UpdateKind.UNKNOWN


def test_multi_target_and_foreign_assignments_are_ignored() -> None:
    updates = _updates(
        """
        package store

        type Store struct {
        	data []int
        	n    int
        }

        func (s *Store) Add(a int) {
        	s.data, s.n = append(s.data, a), s.n+1
        	other.data = append(other.data, a)
        	data := append(s.data, a)
        	_ = data
        }
        """
    )
    assert updates == []


def test_nested_blocks_are_not_inspected() -> None:
    updates = _updates(
        """
        package store

        type Store struct {
        	data []int
        }

        func (s *Store) Add(a int) {
        	if a > 0 {
        		s.data = append(s.data, a)
        	}
        	for i := 0; i < a; i++ {
        		s.data = append(s.data, i)
        	}
        	func() {
        		s.data = append(s.data, a)
        	}()
        }
        """
    )
    assert updates == []


@pytest.mark.parametrize("receiver", ["s Store", "s *Store", "s Store[T]", "s *Store[T]"])
def test_receiver_shapes_resolve_owning_type(receiver: str) -> None:
    updates = _updates(
        f"""
        package store

        func ({receiver}) Add(a int) {{
        	s.data = append(s.data, a)
        }}
        """
    )
    assert len(updates) == 1
    assert updates[0].target.identity == "Store"


def test_custom_operation_names() -> None:
    updates = _updates(
        """
        package store

        type Store struct {
        	data []int
        }

        func (s *Store) Add(a int) {
        	s.data = ring.Push(s.data, a)
        }

        func (s *Store) Trim() {
        	s.data = ring.Trim(s.data)
        }
        """,
        operations=OperationNames(shrink=("ring.Trim",), grow=("ring.Push",)),
    )
    assert [update.kind for update in updates] == [UpdateKind.GROW, UpdateKind.SHRINK]


_QUALIFIED_RECEIVER = """
package store

func (s *other.Store) Add(a int) {
	s.data = append(s.data, a)
}
"""


def test_unsupported_receiver_shape_aborts() -> None:
    with pytest.raises(UnsupportedConstruct) as excinfo:
        _updates(_QUALIFIED_RECEIVER)
    assert excinfo.value.kind is UnsupportedKind.RECEIVER_SHAPE
    assert excinfo.value.position.line == 3


def test_unsupported_receiver_shape_collected() -> None:
    unit = parse_unit(_QUALIFIED_RECEIVER)
    sink = UnsupportedSink()
    found = updates_from_method(
        methods(unit)[0],
        unit,
        operations=OperationNames(),
        report_unsupported=sink,
    )
    assert found == []
    assert [exc.kind for exc in sink.collected] == [UnsupportedKind.RECEIVER_SHAPE]


def test_unsupported_receiver_without_field_assignments_is_accepted() -> None:
    updates = _updates(
        """
        package store

        func (s *other.Store) Len() int {
        	return 0
        }
        """
    )
    assert updates == []
