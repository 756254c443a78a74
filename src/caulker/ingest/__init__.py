from caulker.ingest.adapter_contract import LanguageAdapter, ParsedFileUnit
from caulker.ingest.build_constraints import BuildContext, evaluate_constraint, host_context
from caulker.ingest.go_adapter import FileHeader, GoAdapter, parse_go_source, read_file_header
from caulker.ingest.go_packages import GoPackage, load_packages, resolve_packages

__all__ = [
    "BuildContext",
    "FileHeader",
    "GoAdapter",
    "GoPackage",
    "LanguageAdapter",
    "ParsedFileUnit",
    "evaluate_constraint",
    "host_context",
    "load_packages",
    "parse_go_source",
    "read_file_header",
    "resolve_packages",
]
