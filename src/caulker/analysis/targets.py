from __future__ import annotations

import logging

from tree_sitter import Node

from caulker.analysis.model import Target
from caulker.analysis.mutations import ReportUnsupported
from caulker.analysis.syntax import iter_named, node_position, node_text
from caulker.exceptions import UnsupportedConstruct, UnsupportedKind
from caulker.ingest.adapter_contract import ParsedFileUnit

logger = logging.getLogger(__name__)

SEQUENCE_TYPES = frozenset({"slice_type", "array_type"})

# Top-level nodes that can never host a growable target.
_IGNORED_TOP_LEVEL = frozenset(
    {
        "package_clause",
        "import_declaration",
        "const_declaration",
        "function_declaration",
        "method_declaration",
        "comment",
    }
)


def growable_fields(struct: Node, identity: str, unit: ParsedFileUnit) -> list[Target]:
    targets: list[Target] = []
    for field_list in iter_named(struct, "field_declaration_list"):
        for declaration in iter_named(field_list, "field_declaration"):
            type_node = declaration.child_by_field_name("type")
            if type_node is None:
                continue
            if type_node.type == "map_type":
                raise UnsupportedConstruct(
                    UnsupportedKind.MAP_FIELD,
                    node_position(declaration, unit.path),
                    f"{identity}: {' '.join(node_text(declaration, unit.source).split())}",
                )
            if type_node.type not in SEQUENCE_TYPES:
                continue
            # Embedded fields have no names and are skipped here.
            for name in declaration.children_by_field_name("name"):
                targets.append(
                    Target(
                        identity=identity,
                        field_name=node_text(name, unit.source),
                        position=node_position(name, unit.path),
                    )
                )
    return targets


def targets_from_type_spec(spec: Node, unit: ParsedFileUnit) -> list[Target]:
    name_node = spec.child_by_field_name("name")
    type_node = spec.child_by_field_name("type")
    identity = node_text(name_node, unit.source) if name_node is not None else "?"
    if spec.type != "type_spec" or type_node is None or type_node.type != "struct_type":
        raise UnsupportedConstruct(
            UnsupportedKind.NON_STRUCT_TYPE,
            node_position(spec, unit.path),
            identity,
        )
    return growable_fields(type_node, identity, unit)


def extract_targets(unit: ParsedFileUnit, *, report_unsupported: ReportUnsupported) -> list[Target]:
    """Targets for every sequence-typed struct field in one file, in declaration order.

    Shapes the analysis cannot verify (non-struct types, map fields,
    package-level variables, unknown declarations) are handed to
    ``report_unsupported`` rather than skipped silently. When it returns
    instead of raising, the offending declaration contributes no targets.
    """
    targets: list[Target] = []
    for decl in unit.root.named_children:
        if decl.type in _IGNORED_TOP_LEVEL:
            continue
        if decl.type == "type_declaration":
            for spec in decl.named_children:
                if spec.type == "comment":
                    continue
                try:
                    found = targets_from_type_spec(spec, unit)
                except UnsupportedConstruct as exc:
                    report_unsupported(exc)
                    continue
                for target in found:
                    logger.debug("%s: growable target %s", target.position, target)
                targets.extend(found)
            continue
        if decl.type == "var_declaration":
            report_unsupported(
                UnsupportedConstruct(
                    UnsupportedKind.PACKAGE_VARIABLE,
                    node_position(decl, unit.path),
                    node_text(decl, unit.source).splitlines()[0].strip(),
                )
            )
            continue
        report_unsupported(
            UnsupportedConstruct(
                UnsupportedKind.UNKNOWN_DECLARATION,
                node_position(decl, unit.path),
                decl.type,
            )
        )
    return targets
