"""Source parsing: structural trees for rule matching."""

from renderlint.kernel.source.nodes import (
    Node,
    NodeKind,
    SourceUnit,
    identifier_names,
    iter_nodes,
    iter_with_ancestors,
)
from renderlint.kernel.source.parser import (
    SUPPORTED_EXTENSIONS,
    language_for,
    parse_file,
    parse_source,
)

__all__ = [
    "Node",
    "NodeKind",
    "SourceUnit",
    "SUPPORTED_EXTENSIONS",
    "identifier_names",
    "iter_nodes",
    "iter_with_ancestors",
    "language_for",
    "parse_file",
    "parse_source",
]
