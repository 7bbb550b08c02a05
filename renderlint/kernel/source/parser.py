"""Source parser: turns JS/TS/JSX/TSX text into a structural Node tree.

Parsing uses tree-sitter grammars and is purely structural: no imports, types
or cross-file references are resolved. The concrete syntax tree is reduced to
the handful of node kinds rules match on (components, JSX elements, calls,
inline functions and literals); everything else becomes ``Other``.
"""

from __future__ import annotations

import re
from functools import partial
from pathlib import Path, PurePath
from typing import TYPE_CHECKING

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Parser

from renderlint.kernel.exceptions import ParseError
from renderlint.kernel.source.nodes import Node, NodeKind, SourceUnit

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    import tree_sitter

    _Finish = Callable[[list[Node]], Node]
    _Plan = tuple[list["_Task"], _Finish]
    _Task = tree_sitter.Node | Callable[[], _Plan]

_LANGUAGES: dict[str, Language] = {
    "tsx": Language(tree_sitter_typescript.language_tsx()),
    "typescript": Language(tree_sitter_typescript.language_typescript()),
    "javascript": Language(tree_sitter_javascript.language()),
}

# The JavaScript grammar parses JSX natively.
_EXTENSION_LANGUAGES: dict[str, str] = {
    ".tsx": "tsx",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
}

SUPPORTED_EXTENSIONS = frozenset(_EXTENSION_LANGUAGES)

# Calls whose first argument is the component implementation
WRAPPER_CALLEES = frozenset({"memo", "React.memo", "forwardRef", "React.forwardRef"})

# Superclasses that make a class a component with a render method
COMPONENT_BASE_CLASSES = frozenset({
    "Component",
    "PureComponent",
    "React.Component",
    "React.PureComponent",
})

_FUNCTION_TYPES = frozenset({
    "arrow_function",
    "function",
    "function_expression",
    "generator_function",
})
_TRANSPARENT_TYPES = frozenset({
    "parenthesized_expression",
    "as_expression",
    "satisfies_expression",
    "non_null_expression",
})
_NAMED_TYPES = frozenset({
    "identifier",
    "property_identifier",
    "shorthand_property_identifier",
    "member_expression",
    "this",
})
_SKIPPED_TYPES = frozenset({"comment", "html_comment"})

_WHITESPACE_RE = re.compile(r"\s+")


def language_for(path: str | PurePath) -> str:
    """Return the grammar name for a file path.

    Raises
    ------
    ParseError
        If the file extension is not supported
    """
    suffix = PurePath(path).suffix.lower()
    try:
        return _EXTENSION_LANGUAGES[suffix]
    except KeyError:
        raise ParseError(str(path), f"unsupported file type '{suffix or '<none>'}'") from None


def is_component_name(name: str | None) -> bool:
    """Components are named with a leading upper-case letter."""
    return bool(name) and name[0].isupper()  # type: ignore[index]


def parse_source(text: str, path: str) -> SourceUnit:
    """Parse source text into a SourceUnit.

    Parameters
    ----------
    text : str
        File contents
    path : str
        File path, used for grammar selection and error reporting

    Returns
    -------
    SourceUnit
        Immutable structural representation of the file

    Raises
    ------
    ParseError
        If the file type is unsupported or the text contains syntax errors
    """
    language = _LANGUAGES[language_for(path)]
    source = text.encode("utf-8", errors="replace")
    # Parser instances are not shared between threads.
    tree = Parser(language).parse(source)
    builder = _TreeBuilder(source)

    if tree.root_node.has_error:
        error_node = _first_error(tree.root_node)
        line, column = builder.position(error_node or tree.root_node)
        reason = (
            f"missing '{error_node.type}'"
            if error_node is not None and error_node.is_missing
            else "syntax error"
        )
        raise ParseError(path, reason, line=line, column=column)

    root = builder.convert(tree.root_node)
    return SourceUnit(path=path, root=root, line_count=text.count("\n") + 1)


def parse_file(path: str | Path) -> SourceUnit:
    """Read a file as UTF-8 and parse it.

    Raises
    ------
    ParseError
        If the file cannot be read, has an unsupported type, or fails to parse
    """
    file_path = Path(path)
    language_for(file_path)
    try:
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(str(path), f"cannot read file: {e}") from e
    return parse_source(text, str(path))


def _first_error(node: tree_sitter.Node) -> tree_sitter.Node | None:
    """Find the first ERROR or MISSING node in source order."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current
        if current.has_error:
            stack.extend(reversed(current.children))
    return None


def _unwrap(ts: tree_sitter.Node) -> tree_sitter.Node:
    """Strip parentheses and type assertions around an expression."""
    while ts.type in _TRANSPARENT_TYPES and ts.named_children:
        ts = ts.named_children[0]
    return ts


def _named(ts: tree_sitter.Node) -> list[tree_sitter.Node]:
    return [c for c in ts.named_children if c.type not in _SKIPPED_TYPES]


class _TreeBuilder:
    """Converts a tree-sitter syntax tree into renderlint Nodes.

    Conversion runs on an explicit work stack so deeply nested expressions
    (long ``+`` chains, nested ternaries, method chains) do not hit the
    interpreter's recursion limit. Each handler returns a ``_Plan``: the
    child tasks to convert, plus a function that assembles the node once
    their results are available in order.
    """

    def __init__(self, source: bytes) -> None:
        self._source = source
        self._line_starts = [0]
        for index, byte in enumerate(source):
            if byte == 0x0A:
                self._line_starts.append(index + 1)
        self._handlers: dict[str, Callable[[tree_sitter.Node], _Plan]] = {
            "function_declaration": self._function_declaration,
            "generator_function_declaration": self._function_declaration,
            "class_declaration": self._class,
            "class": self._class,
            "variable_declarator": self._variable_declarator,
            "call_expression": self._call_expression,
            "jsx_element": self._jsx_element,
            "jsx_self_closing_element": self._jsx_element,
            "jsx_expression": self._jsx_expression,
            "object": self._literal,
            "array": self._literal,
        }
        for function_type in _FUNCTION_TYPES:
            self._handlers[function_type] = self._arrow_function

    # -- helpers --------------------------------------------------------------

    def position(self, ts: tree_sitter.Node) -> tuple[int, int]:
        """1-based (line, column) of a node start, with columns counted in characters."""
        row, byte_column = ts.start_point
        start = self._line_starts[row]
        prefix = self._source[start : start + byte_column]
        return row + 1, len(prefix.decode("utf-8", errors="replace")) + 1

    def _text(self, ts: tree_sitter.Node) -> str:
        text = self._source[ts.start_byte : ts.end_byte].decode("utf-8", errors="replace")
        return _WHITESPACE_RE.sub("", text).replace("?.", ".")

    def _make(
        self,
        kind: NodeKind,
        name: str | None,
        ts: tree_sitter.Node,
        children: tuple[Node, ...] = (),
        attributes: Mapping[str, Node] | None = None,
    ) -> Node:
        line, column = self.position(ts)
        return Node(
            kind=kind,
            name=name,
            line=line,
            column=column,
            children=children,
            attributes=attributes or {},
        )

    # -- dispatch -------------------------------------------------------------

    def convert(self, root: tree_sitter.Node) -> Node:
        """Convert a syntax tree without recursing per nesting level."""
        results: list[Node] = []
        stack: list[tuple[_Task, _Finish | None, int]] = [(root, None, 0)]
        while stack:
            task, finish, count = stack.pop()
            if finish is not None:
                start = len(results) - count
                children = results[start:]
                del results[start:]
                results.append(finish(children))
                continue
            tasks, finish = task() if callable(task) else self._plan(task)
            stack.append((task, finish, len(tasks)))
            stack.extend((child, None, 0) for child in reversed(tasks))
        return results[0]

    def _plan(self, ts: tree_sitter.Node) -> _Plan:
        handler = self._handlers.get(ts.type)
        if handler is not None:
            return handler(ts)
        return self._other(ts)

    def _other(self, ts: tree_sitter.Node, name: str | None = None) -> _Plan:
        if name is None and ts.type in _NAMED_TYPES:
            name = self._text(ts)
        return _named(ts), lambda nodes: self._make(NodeKind.OTHER, name, ts, tuple(nodes))

    # -- declarations ---------------------------------------------------------

    def _function_declaration(self, ts: tree_sitter.Node) -> _Plan:
        name_node = ts.child_by_field_name("name")
        name = self._text(name_node) if name_node is not None else None
        kind = NodeKind.FUNCTION_COMPONENT_DECL if is_component_name(name) else NodeKind.OTHER
        rest = [c for c in _named(ts) if c != name_node]
        return rest, lambda nodes: self._make(kind, name, ts, tuple(nodes))

    def _class(self, ts: tree_sitter.Node) -> _Plan:
        body = ts.child_by_field_name("body")
        if body is None or not self._extends_component(ts):
            return self._other(ts)
        name_node = ts.child_by_field_name("name")
        name = self._text(name_node) if name_node is not None else None

        # Members hang directly off the class so a render method's parent is the class
        tasks: list[_Task] = []
        for member in _named(body):
            member_name = member.child_by_field_name("name")
            tasks.append(
                partial(
                    self._other,
                    member,
                    self._text(member_name) if member_name is not None else None,
                )
            )
        return tasks, lambda nodes: self._make(
            NodeKind.CLASS_COMPONENT_DECL, name, ts, tuple(nodes)
        )

    def _extends_component(self, ts: tree_sitter.Node) -> bool:
        for heritage in _named(ts):
            if heritage.type != "class_heritage":
                continue
            for clause in _named(heritage):
                # TypeScript wraps the superclass in an extends_clause
                if clause.type == "extends_clause":
                    superclass = clause.child_by_field_name("value")
                    if superclass is not None:
                        clause = superclass
                if self._text(clause) in COMPONENT_BASE_CLASSES:
                    return True
        return False

    def _variable_declarator(self, ts: tree_sitter.Node) -> _Plan:
        name_node = ts.child_by_field_name("name")
        value = ts.child_by_field_name("value")
        if name_node is None or value is None or name_node.type != "identifier":
            return self._other(ts)
        name = self._text(name_node)
        if not is_component_name(name):
            return self._other(ts)

        # const Card = memo(forwardRef((props, ref) => ...))
        wrappers: list[tree_sitter.Node] = []
        inner = _unwrap(value)
        while inner.type == "call_expression":
            callee = inner.child_by_field_name("function")
            arguments = inner.child_by_field_name("arguments")
            if callee is None or arguments is None or self._text(callee) not in WRAPPER_CALLEES:
                break
            args = _named(arguments)
            if not args:
                break
            wrappers.append(inner)
            inner = _unwrap(args[0])

        if inner.type not in _FUNCTION_TYPES:
            return self._other(ts)

        extras = [_named(call.child_by_field_name("arguments"))[1:] for call in wrappers]

        def finish(nodes: list[Node]) -> Node:
            name_out, function, rest = nodes[0], nodes[1], nodes[2:]
            declared = self._make(
                NodeKind.FUNCTION_COMPONENT_DECL, name, ts, function.children, function.attributes
            )
            offsets: list[int] = []
            cursor = 0
            for extra in extras:
                offsets.append(cursor)
                cursor += len(extra)
            for call, extra, offset in reversed(list(zip(wrappers, extras, offsets, strict=True))):
                callee = call.child_by_field_name("function")
                args = (declared, *rest[offset : offset + len(extra)])
                declared = self._make(
                    NodeKind.CALL_EXPRESSION,
                    self._text(callee),
                    call,
                    args,
                    {str(i): arg for i, arg in enumerate(args)},
                )
            return self._make(NodeKind.OTHER, None, ts, (name_out, declared))

        tasks: list[_Task] = [name_node, inner]
        for extra in extras:
            tasks.extend(extra)
        return tasks, finish

    # -- expressions ----------------------------------------------------------

    def _arrow_function(self, ts: tree_sitter.Node) -> _Plan:
        single = ts.child_by_field_name("parameter")
        if single is not None:
            params = [single]
        else:
            formal = ts.child_by_field_name("parameters")
            params = _named(formal) if formal is not None else []
        body = ts.child_by_field_name("body")

        tasks: list[_Task] = [partial(self._other, p, self._parameter_name(p)) for p in params]
        if body is not None:
            tasks.append(body)

        def finish(nodes: list[Node]) -> Node:
            param_nodes = tuple(nodes[: len(params)])
            return self._make(
                NodeKind.ARROW_FUNCTION,
                None,
                ts,
                tuple(nodes),
                {str(i): p for i, p in enumerate(param_nodes)},
            )

        return tasks, finish

    def _parameter_name(self, ts: tree_sitter.Node) -> str | None:
        if ts.type == "identifier":
            return self._text(ts)
        # TypeScript required/optional parameters and default values
        for field_name in ("pattern", "left"):
            inner = ts.child_by_field_name(field_name)
            if inner is not None and inner.type == "identifier":
                return self._text(inner)
        return None

    def _call_expression(self, ts: tree_sitter.Node) -> _Plan:
        callee = ts.child_by_field_name("function")
        arguments = ts.child_by_field_name("arguments")
        # Tagged templates carry a template string instead of an argument list
        if callee is None or arguments is None or arguments.type != "arguments":
            return self._other(ts)
        raw_args = [_unwrap(a) for a in _named(arguments)]
        name = self._text(callee)

        # export default memo(function Card() { ... })
        component: str | None = None
        if name in WRAPPER_CALLEES and raw_args and raw_args[0].type in _FUNCTION_TYPES:
            inner_name = raw_args[0].child_by_field_name("name")
            if inner_name is not None and is_component_name(self._text(inner_name)):
                component = self._text(inner_name)

        def finish(nodes: list[Node]) -> Node:
            callee_node, args = nodes[0], tuple(nodes[1:])
            if component is not None:
                first = args[0]
                args = (
                    self._make(
                        NodeKind.FUNCTION_COMPONENT_DECL,
                        component,
                        raw_args[0],
                        first.children,
                        first.attributes,
                    ),
                    *args[1:],
                )
            return self._make(
                NodeKind.CALL_EXPRESSION,
                name,
                ts,
                (callee_node, *args),
                {str(i): arg for i, arg in enumerate(args)},
            )

        return [callee, *raw_args], finish

    def _literal(self, ts: tree_sitter.Node) -> _Plan:
        kind = NodeKind.OBJECT_LITERAL if ts.type == "object" else NodeKind.ARRAY_LITERAL
        return _named(ts), lambda nodes: self._make(kind, None, ts, tuple(nodes))

    # -- JSX ------------------------------------------------------------------

    def _jsx_element(self, ts: tree_sitter.Node) -> _Plan:
        if ts.type == "jsx_self_closing_element":
            tag, body = ts, []
        else:
            tag = ts.child_by_field_name("open_tag") or ts.named_children[0]
            close = ts.child_by_field_name("close_tag")
            body = [c for c in _named(ts) if c != tag and c != close]

        name_node = tag.child_by_field_name("name")
        name = self._text(name_node) if name_node is not None else None

        prop_names: list[str] = []
        prop_sources: list[tree_sitter.Node] = []
        tasks: list[_Task] = []
        for attr in _named(tag):
            if attr == name_node:
                continue
            if attr.type == "jsx_attribute":
                parts = _named(attr)
                prop_names.append(self._text(parts[0]))
                if len(parts) < 2:
                    # Boolean shorthand: <Input disabled />
                    tasks.append(partial(self._leaf, attr))
                else:
                    tasks.append(parts[1])
            elif attr.type == "jsx_expression":
                # {...props}
                prop_names.append("...")
                tasks.append(partial(self._other, attr))
            else:
                continue
            prop_sources.append(attr)
        tasks.extend(body)

        def finish(nodes: list[Node]) -> Node:
            values = nodes[: len(prop_names)]
            attributes = dict(zip(prop_names, values, strict=True))
            props = tuple(
                self._make(NodeKind.PROP_ASSIGNMENT, prop_name, attr, (value,))
                for prop_name, attr, value in zip(prop_names, prop_sources, values, strict=True)
            )
            children = (*props, *nodes[len(prop_names) :])
            return self._make(NodeKind.JSX_ELEMENT, name, ts, children, attributes)

        return tasks, finish

    def _leaf(self, ts: tree_sitter.Node) -> _Plan:
        return [], lambda _: self._make(NodeKind.OTHER, None, ts)

    def _jsx_expression(self, ts: tree_sitter.Node) -> _Plan:
        inner = _named(ts)
        if len(inner) != 1 or inner[0].type == "spread_element":
            return self._other(ts)
        return [_unwrap(inner[0])], lambda nodes: nodes[0]
