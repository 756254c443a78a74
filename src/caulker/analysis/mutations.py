"""Classify field assignments inside methods as growth or shrink events."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from tree_sitter import Node

from caulker.analysis.model import Target, Update, UpdateKind
from caulker.analysis.syntax import body_statements, compact_text, iter_named, node_position, node_text
from caulker.exceptions import UnsupportedConstruct, UnsupportedKind
from caulker.ingest.adapter_contract import ParsedFileUnit
from caulker.invariants import never

logger = logging.getLogger(__name__)

ReportUnsupported = Callable[[UnsupportedConstruct], None]

DEFAULT_SHRINK_OPERATIONS: tuple[str, ...] = (
    "slices.Clip",
    "slices.Compact",
    "slices.CompactFunc",
    "slices.Delete",
    "slices.DeleteFunc",
)

DEFAULT_GROW_OPERATIONS: tuple[str, ...] = (
    "append",
    "slices.AppendSeq",
    "slices.Grow",
    "slices.Insert",
    "slices.Repeat",
)


@dataclass(frozen=True)
class OperationNames:
    shrink: tuple[str, ...] = DEFAULT_SHRINK_OPERATIONS
    grow: tuple[str, ...] = DEFAULT_GROW_OPERATIONS

    def classify(self, callee: str) -> UpdateKind:
        # Prefix match, so "slices.Delete" also covers "slices.DeleteFunc".
        # Shrink is checked first and wins when both lists match.
        if any(callee.startswith(name) for name in self.shrink):
            return UpdateKind.SHRINK
        if any(callee.startswith(name) for name in self.grow):
            return UpdateKind.GROW
        return UpdateKind.UNKNOWN


def receiver_type_name(type_node: Node, unit: ParsedFileUnit) -> str:
    """Owning type name of a receiver declared as ``T``, ``*T``, ``T[...]`` or ``*T[...]``."""
    node: Node | None = type_node
    if node is not None and node.type == "pointer_type":
        inner = [child for child in node.named_children if child.type != "comment"]
        node = inner[0] if inner else None
    if node is not None and node.type == "generic_type":
        node = node.child_by_field_name("type")
    if node is not None and node.type == "type_identifier":
        return node_text(node, unit.source)
    raise UnsupportedConstruct(
        UnsupportedKind.RECEIVER_SHAPE,
        node_position(type_node, unit.path),
        compact_text(type_node, unit.source),
    )


def _receiver(method: Node, unit: ParsedFileUnit) -> tuple[str | None, Node]:
    receiver_list = method.child_by_field_name("receiver")
    params = list(iter_named(receiver_list, "parameter_declaration")) if receiver_list else []
    if not params:
        never("method declaration without receiver", path=str(unit.path), line=method.start_point[0] + 1)
    param = params[0]
    name_node = param.child_by_field_name("name")
    type_node = param.child_by_field_name("type")
    if type_node is None:
        never("receiver without type", path=str(unit.path), line=param.start_point[0] + 1)
    name = node_text(name_node, unit.source) if name_node is not None else None
    return name, type_node


def assigned_receiver_field(
    statement: Node,
    receiver_name: str | None,
    source: bytes,
) -> tuple[str, Node] | None:
    """Field name and right-hand side of ``recv.field = <expr>``, or None."""
    if statement.type != "assignment_statement" or receiver_name is None:
        return None
    left = statement.child_by_field_name("left")
    right = statement.child_by_field_name("right")
    if left is None or right is None:
        return None
    lhs = left.named_children
    rhs = right.named_children
    # Multi-target assignments are never classified.
    if len(lhs) != 1 or len(rhs) != 1:
        return None
    selector = lhs[0]
    if selector.type != "selector_expression":
        return None
    operand = selector.child_by_field_name("operand")
    field = selector.child_by_field_name("field")
    if operand is None or field is None or operand.type != "identifier":
        return None
    if node_text(operand, source) != receiver_name:
        return None
    return node_text(field, source), rhs[0]


def classify_expression(expr: Node, source: bytes, operations: OperationNames) -> UpdateKind:
    if expr.type != "call_expression":
        return UpdateKind.UNKNOWN
    function = expr.child_by_field_name("function")
    if function is None:
        return UpdateKind.UNKNOWN
    return operations.classify(compact_text(function, source))


def updates_from_method(
    method: Node,
    unit: ParsedFileUnit,
    *,
    operations: OperationNames,
    report_unsupported: ReportUnsupported,
) -> list[Update]:
    """Updates implied by the top-level statements of one method body.

    Nested blocks, closures and called helpers are not inspected. The
    receiver type is only resolved once a statement assigns to a receiver
    field, so methods that never do are accepted whatever their receiver.
    """
    if method.type != "method_declaration":
        return []
    body = method.child_by_field_name("body")
    if body is None:
        return []
    receiver_name, receiver_type = _receiver(method, unit)
    identity: str | None = None
    updates: list[Update] = []
    for statement in body_statements(body):
        assigned = assigned_receiver_field(statement, receiver_name, unit.source)
        if assigned is None:
            continue
        field_name, rhs = assigned
        if identity is None:
            try:
                identity = receiver_type_name(receiver_type, unit)
            except UnsupportedConstruct as exc:
                report_unsupported(exc)
                return []
        operator = statement.child_by_field_name("operator") or statement
        update = Update(
            target=Target(identity=identity, field_name=field_name),
            kind=classify_expression(rhs, unit.source, operations),
            position=node_position(operator, unit.path),
        )
        logger.debug("%s: %s update of %s", update.position, update.kind.value, update.target)
        updates.append(update)
    return updates
