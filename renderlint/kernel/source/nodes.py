"""Structural tree model for parsed source files."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType


class NodeKind(StrEnum):
    """Kinds of structural nodes that rules can match on."""

    FUNCTION_COMPONENT_DECL = "FunctionComponentDecl"
    CLASS_COMPONENT_DECL = "ClassComponentDecl"
    JSX_ELEMENT = "JSXElement"
    CALL_EXPRESSION = "CallExpression"
    ARROW_FUNCTION = "ArrowFunction"
    PROP_ASSIGNMENT = "PropAssignment"
    OBJECT_LITERAL = "ObjectLiteral"
    ARRAY_LITERAL = "ArrayLiteral"
    OTHER = "Other"


@dataclass(frozen=True, slots=True)
class Node:
    """A structural element of a source file.

    Attributes
    ----------
    kind : NodeKind
        Structural kind
    name : str | None
        Tag name for JSX elements, dotted callee for calls, declared name for
        components, identifier text for identifiers and member expressions
    line : int
        1-based line of the node start
    column : int
        1-based column of the node start
    children : tuple[Node, ...]
        Child nodes in source order
    attributes : Mapping[str, Node]
        JSX attribute name -> value node, or positional index -> argument
        (calls) / parameter (arrow functions)
    """

    kind: NodeKind
    name: str | None
    line: int
    column: int
    children: tuple[Node, ...] = ()
    attributes: Mapping[str, Node] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.attributes, MappingProxyType):
            object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    @property
    def is_component_tag(self) -> bool:
        """True for JSX elements whose tag names a component rather than a DOM element."""
        if self.kind is not NodeKind.JSX_ELEMENT or not self.name:
            return False
        return self.name[0].isupper() or "." in self.name


@dataclass(frozen=True, slots=True)
class SourceUnit:
    """One analyzed file: its path and the root of its structural tree."""

    path: str
    root: Node
    line_count: int = 0


def iter_with_ancestors(root: Node) -> Iterator[tuple[Node, tuple[Node, ...]]]:
    """Walk ``root`` depth-first in source order.

    Yields ``(node, ancestors)`` where ``ancestors`` lists the enclosing nodes,
    outermost first. The root itself is yielded with an empty chain.
    """
    stack: list[tuple[Node, tuple[Node, ...]]] = [(root, ())]
    while stack:
        node, ancestors = stack.pop()
        yield node, ancestors
        chain = (*ancestors, node)
        for child in reversed(node.children):
            stack.append((child, chain))


def iter_nodes(root: Node, kind: NodeKind | None = None) -> Iterator[Node]:
    """Iterate over every node below ``root`` (inclusive), optionally filtered by kind."""
    for node, _ in iter_with_ancestors(root):
        if kind is None or node.kind is kind:
            yield node


def identifier_names(node: Node) -> set[str]:
    """Collect the names of every identifier-like node in a subtree."""
    return {n.name for n in iter_nodes(node, NodeKind.OTHER) if n.name}
