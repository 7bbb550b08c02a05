"""Component-level rules for React rendering performance anti-patterns.

Every rule receives one parsed ``SourceUnit`` and reports what it finds in
that unit alone. Rules never share state; helpers below recompute whatever
a rule needs from the unit's tree.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from renderlint.kernel.linting.models import Diagnostic, Severity
from renderlint.kernel.linting.rules import Rule, RuleCatalog
from renderlint.kernel.source.nodes import (
    Node,
    NodeKind,
    SourceUnit,
    identifier_names,
    iter_nodes,
    iter_with_ancestors,
)
from renderlint.kernel.source.parser import WRAPPER_CALLEES

if TYPE_CHECKING:
    from renderlint.kernel.config.models import RuleSetting

MEMO_CALLEES = frozenset({"memo", "React.memo"})
HOOK_WRAPPED_CALLEES = frozenset({
    "useCallback",
    "React.useCallback",
    "useMemo",
    "React.useMemo",
})

# Props React consumes itself; never forwarded to the component
_RESERVED_PROPS = frozenset({"key", "ref"})
_SPREAD = "..."
_RENDER_METHOD = "render"

_MAPPING_METHODS = frozenset({"map", "flatMap"})
_HANDLER_PROP_RE = re.compile(r"^on[A-Z]")

_LITERAL_KINDS = frozenset({NodeKind.OBJECT_LITERAL, NodeKind.ARRAY_LITERAL})
_CONTEXT_VALUE_KINDS = _LITERAL_KINDS | {NodeKind.ARROW_FUNCTION}


# ---------------------------------------------------------------------------
# Shared tree queries
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ListItem:
    """A JSX element produced directly by a mapping callback."""

    element: Node
    call: Node
    callback: Node

    @property
    def index_name(self) -> str | None:
        """Name of the callback's index parameter, if it declares one."""
        param = self.callback.attributes.get("1")
        return param.name if param is not None else None


def _is_mapping_call(call: Node, callback: Node) -> bool:
    name = call.name or ""
    if name == "Array.from":
        return call.attributes.get("1") is callback
    receiver, _, method = name.rpartition(".")
    if not receiver or method not in _MAPPING_METHODS:
        return False
    return any(arg is callback for arg in call.attributes.values())


def list_item_of(element: Node, ancestors: tuple[Node, ...]) -> ListItem | None:
    """Return the list-item context of ``element``, or None if it is not one.

    Walking up the ancestor chain, the first node that is not ``Other`` must
    be an ``ArrowFunction`` passed to a ``.map``/``.flatMap`` call (or as the
    mapping function of ``Array.from``). An element nested inside another
    element, a prop value or any other call is not a list item.
    """
    for index in range(len(ancestors) - 1, -1, -1):
        node = ancestors[index]
        if node.kind is NodeKind.OTHER:
            continue
        if node.kind is not NodeKind.ARROW_FUNCTION or index == 0:
            return None
        call = ancestors[index - 1]
        if call.kind is NodeKind.CALL_EXPRESSION and _is_mapping_call(call, node):
            return ListItem(element=element, call=call, callback=node)
        return None
    return None


def iter_list_items(unit: SourceUnit) -> Iterator[ListItem]:
    """Yield every list item element of a unit in source order."""
    for node, ancestors in iter_with_ancestors(unit.root):
        if node.kind is NodeKind.JSX_ELEMENT:
            item = list_item_of(node, ancestors)
            if item is not None:
                yield item


def enclosing_component(ancestors: tuple[Node, ...]) -> Node | None:
    """Return the innermost component whose render body contains a node.

    A function component's whole body renders; for a class component only
    the ``render`` method does.
    """
    for index in range(len(ancestors) - 1, -1, -1):
        node = ancestors[index]
        if node.kind is NodeKind.FUNCTION_COMPONENT_DECL:
            return node
        if node.kind is NodeKind.CLASS_COMPONENT_DECL:
            member = ancestors[index + 1] if index + 1 < len(ancestors) else None
            return node if member is not None and member.name == _RENDER_METHOD else None
    return None


def iter_render_elements(unit: SourceUnit) -> Iterator[tuple[Node, Node]]:
    """Yield ``(element, component)`` for JSX elements inside a component body."""
    for node, ancestors in iter_with_ancestors(unit.root):
        if node.kind is not NodeKind.JSX_ELEMENT:
            continue
        component = enclosing_component(ancestors)
        if component is not None:
            yield node, component


def iter_props(element: Node) -> Iterator[tuple[Node, Node]]:
    """Yield ``(prop, value)`` for each attribute of a JSX element, spreads excluded."""
    for child in element.children:
        if child.kind is NodeKind.PROP_ASSIGNMENT and child.name != _SPREAD and child.children:
            yield child, child.children[0]


def declared_components(unit: SourceUnit) -> frozenset[str]:
    """Names of function components declared in the unit."""
    return frozenset(
        node.name
        for node in iter_nodes(unit.root, NodeKind.FUNCTION_COMPONENT_DECL)
        if node.name
    )


def memoized_components(unit: SourceUnit) -> frozenset[str]:
    """Names of components whose own declaration is wrapped in ``memo``/``React.memo``.

    Covers ``const Card = memo(...)`` and ``export default memo(function Card() {...})``.
    ``const MemoCard = memo(Card)`` does not count: the ``<Card>`` tag still
    renders the unwrapped function.
    """
    names: set[str] = set()
    for call in iter_nodes(unit.root, NodeKind.CALL_EXPRESSION):
        if call.name not in MEMO_CALLEES:
            continue
        target = call.attributes.get("0")
        # memo(forwardRef(function Card() {...}))
        while (
            target is not None
            and target.kind is NodeKind.CALL_EXPRESSION
            and target.name in WRAPPER_CALLEES
        ):
            target = target.attributes.get("0")
        if target is not None and target.kind is NodeKind.FUNCTION_COMPONENT_DECL and target.name:
            names.add(target.name)
    return frozenset(names)


def unmemoized_list_items(unit: SourceUnit) -> list[ListItem]:
    """List items rendering a same-file component that is never memoized."""
    declared = declared_components(unit)
    if not declared:
        return []
    memoized = memoized_components(unit)
    return [
        item
        for item in iter_list_items(unit)
        if item.element.name in declared and item.element.name not in memoized
    ]


def _diagnostic(
    rule_id: str,
    severity: Severity,
    unit: SourceUnit,
    node: Node,
    message: str,
    suggestion: str | None = None,
) -> Diagnostic:
    return Diagnostic(
        rule_id=rule_id,
        severity=severity,
        file_path=unit.path,
        line=node.line,
        column=node.column,
        message=message,
        suggestion=suggestion,
    )


def _tag(element: Node) -> str:
    return f"<{element.name}>" if element.name else "<>"


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


class UnmemoizedRerenderRule:
    """Component rendered per list item without ``React.memo``.

    Only components declared in the same file are considered: whether an
    imported component is memoized cannot be known without resolving imports.
    """

    rule_id = "unmemoized-rerender"
    severity = Severity.WARNING
    description = "List item renders a same-file component that is not memoized"

    def detect(self, unit: SourceUnit) -> list[Diagnostic]:
        """Flag list items whose component is declared here but never memoized."""
        return [
            _diagnostic(
                self.rule_id,
                self.severity,
                unit,
                item.element,
                f"{_tag(item.element)} is rendered for every item of '{item.call.name}' "
                "but is not memoized, so every item re-renders with its parent",
                f"Wrap {item.element.name} in React.memo(...)",
            )
            for item in unmemoized_list_items(unit)
        ]


class UnstableCallbackRule:
    """Inline callback passed to a child component.

    A new function identity is created on every render, defeating the
    child's memoization. When the child is also an unmemoized list item the
    cost multiplies with the list length and the finding is escalated to an
    error.
    """

    rule_id = "unstable-callback"
    severity = Severity.WARNING
    description = "Inline function or bound callback passed as a component prop"

    def detect(self, unit: SourceUnit) -> list[Diagnostic]:
        """Flag inline callback props on component elements inside render bodies."""
        escalated = {id(item.element) for item in unmemoized_list_items(unit)}
        diagnostics: list[Diagnostic] = []
        for element, _ in iter_render_elements(unit):
            if not element.is_component_tag:
                continue
            severity = Severity.ERROR if id(element) in escalated else self.severity
            for prop, value in iter_props(element):
                if not _is_unstable_callback(prop.name or "", value):
                    continue
                diagnostics.append(
                    _diagnostic(
                        self.rule_id,
                        severity,
                        unit,
                        element,
                        f"Prop '{prop.name}' of {_tag(element)} receives a new function "
                        "on every render",
                        "Hoist the handler and wrap it in useCallback",
                    )
                )
        return diagnostics


def _is_unstable_callback(prop_name: str, value: Node) -> bool:
    if value.kind is NodeKind.ARROW_FUNCTION:
        return True
    if value.kind is not NodeKind.CALL_EXPRESSION or not value.name:
        return False
    if value.name in HOOK_WRAPPED_CALLEES:
        return False
    if value.name.endswith(".bind"):
        return True
    # onSelect={makeHandler(id)}
    return bool(_HANDLER_PROP_RE.match(prop_name))


class UnstableLiteralPropRule:
    """Inline object or array literal passed as a prop."""

    rule_id = "unstable-literal-prop"
    severity = Severity.INFO
    description = "Inline object or array literal passed as a prop"

    def detect(self, unit: SourceUnit) -> list[Diagnostic]:
        """Flag literal prop values on elements inside render bodies."""
        diagnostics: list[Diagnostic] = []
        for element, _ in iter_render_elements(unit):
            provider = is_context_provider(element)
            for prop, value in iter_props(element):
                if prop.name in _RESERVED_PROPS or value.kind not in _LITERAL_KINDS:
                    continue
                # Reported by unstable-context-value instead
                if provider and prop.name == "value":
                    continue
                what = "object" if value.kind is NodeKind.OBJECT_LITERAL else "array"
                diagnostics.append(
                    _diagnostic(
                        self.rule_id,
                        self.severity,
                        unit,
                        element,
                        f"Prop '{prop.name}' of {_tag(element)} receives a new {what} "
                        "literal on every render",
                        "Move the constant outside the component or wrap it in useMemo",
                    )
                )
        return diagnostics


class MissingListKeyRule:
    """List item rendered without a ``key``."""

    rule_id = "missing-list-key"
    severity = Severity.ERROR
    description = "Element rendered from a list has no key"

    def detect(self, unit: SourceUnit) -> list[Diagnostic]:
        """Flag list items with neither a key nor a spread that may carry one."""
        diagnostics: list[Diagnostic] = []
        for item in iter_list_items(unit):
            attributes = item.element.attributes
            if "key" in attributes or _SPREAD in attributes:
                continue
            diagnostics.append(
                _diagnostic(
                    self.rule_id,
                    self.severity,
                    unit,
                    item.element,
                    f"{_tag(item.element)} rendered by '{item.call.name}' has no key",
                    "Add a key derived from a stable identifier, e.g. key={item.id}",
                )
            )
        return diagnostics


class IndexAsKeyRule:
    """List item keyed by the mapping callback's index."""

    rule_id = "index-as-key"
    severity = Severity.WARNING
    description = "List item key is the array index"

    def detect(self, unit: SourceUnit) -> list[Diagnostic]:
        """Flag keys built solely from the callback's index parameter."""
        diagnostics: list[Diagnostic] = []
        for item in iter_list_items(unit):
            index_name = item.index_name
            key = item.element.attributes.get("key")
            if index_name is None or key is None or key.kind is not NodeKind.OTHER:
                continue
            if identifier_names(key) != {index_name}:
                continue
            diagnostics.append(
                _diagnostic(
                    self.rule_id,
                    self.severity,
                    unit,
                    item.element,
                    f"{_tag(item.element)} uses the index '{index_name}' as its key; "
                    "reordering the list remounts every item",
                    "Use a stable identifier from the item as the key",
                )
            )
        return diagnostics


def is_context_provider(element: Node) -> bool:
    """True for ``<X.Provider>`` and React 19 style ``<XContext>`` elements."""
    name = element.name or ""
    return name.endswith(".Provider") or (element.is_component_tag and name.endswith("Context"))


class UnstableContextValueRule:
    """Context provider given a fresh value on every render."""

    rule_id = "unstable-context-value"
    severity = Severity.WARNING
    description = "Context provider value is created inline"

    def detect(self, unit: SourceUnit) -> list[Diagnostic]:
        """Flag providers whose value is an inline literal or function."""
        diagnostics: list[Diagnostic] = []
        for element in iter_nodes(unit.root, NodeKind.JSX_ELEMENT):
            if not is_context_provider(element):
                continue
            for prop, value in iter_props(element):
                if prop.name != "value" or value.kind not in _CONTEXT_VALUE_KINDS:
                    continue
                diagnostics.append(
                    _diagnostic(
                        self.rule_id,
                        self.severity,
                        unit,
                        element,
                        f"{_tag(element)} receives a new value on every render, "
                        "re-rendering every consumer",
                        "Memoize the context value with useMemo",
                    )
                )
        return diagnostics


ALL_COMPONENT_RULES: list[Rule] = [
    UnmemoizedRerenderRule(),
    UnstableCallbackRule(),
    UnstableLiteralPropRule(),
    MissingListKeyRule(),
    IndexAsKeyRule(),
    UnstableContextValueRule(),
]


def default_catalog(settings: Mapping[str, RuleSetting] | None = None) -> RuleCatalog:
    """Build a catalog of every component rule with the given per-rule settings."""
    return RuleCatalog(ALL_COMPONENT_RULES, settings)
