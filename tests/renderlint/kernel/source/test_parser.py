"""Tests for renderlint.kernel.source.parser."""

from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest

from renderlint.kernel.exceptions import ParseError
from renderlint.kernel.source import (
    SUPPORTED_EXTENSIONS,
    Node,
    NodeKind,
    iter_nodes,
    iter_with_ancestors,
    language_for,
    parse_file,
    parse_source,
)

PRODUCT_LIST = dedent(
    """\
    function ProductList({ items }) {
      return (
        <ul>
          {items.map((item) => (
            <ProductCard key={item.id} product={item} onSelect={() => select(item)} />
          ))}
        </ul>
      );
    }
    """
)


def _first(root: Node, kind: NodeKind, name: str | None = None) -> Node:
    """Helper returning the first node of a kind (and name) in source order."""
    for node in iter_nodes(root, kind):
        if name is None or node.name == name:
            return node
    raise AssertionError(f"no {kind} named {name!r}")


class TestLanguageSelection:
    @pytest.mark.parametrize(
        ("path", "language"),
        [
            ("App.tsx", "tsx"),
            ("util.ts", "typescript"),
            ("config.mts", "typescript"),
            ("App.jsx", "javascript"),
            ("index.js", "javascript"),
            ("server.cjs", "javascript"),
        ],
    )
    def test_extension_picks_grammar(self, path: str, language: str) -> None:
        assert language_for(path) == language

    def test_supported_extensions(self) -> None:
        assert {".tsx", ".ts", ".jsx", ".js"} <= SUPPORTED_EXTENSIONS

    def test_unsupported_extension(self) -> None:
        with pytest.raises(ParseError, match="unsupported file type"):
            parse_source("body { color: red; }", "styles.css")


class TestStructure:
    def test_function_component_declaration(self) -> None:
        unit = parse_source(PRODUCT_LIST, "ProductList.tsx")
        components = [n.name for n in iter_nodes(unit.root, NodeKind.FUNCTION_COMPONENT_DECL)]
        assert components == ["ProductList"]
        assert unit.path == "ProductList.tsx"
        assert unit.line_count == 10

    def test_lowercase_function_is_not_a_component(self) -> None:
        unit = parse_source("function helper() { return 1; }\n", "util.ts")
        assert list(iter_nodes(unit.root, NodeKind.FUNCTION_COMPONENT_DECL)) == []

    def test_jsx_element_attributes(self) -> None:
        unit = parse_source(PRODUCT_LIST, "ProductList.tsx")
        card = _first(unit.root, NodeKind.JSX_ELEMENT, "ProductCard")

        assert set(card.attributes) == {"key", "product", "onSelect"}
        assert card.attributes["key"].kind is NodeKind.OTHER
        assert card.attributes["key"].name == "item.id"
        assert card.attributes["onSelect"].kind is NodeKind.ARROW_FUNCTION
        assert (card.line, card.column) == (5, 9)
        assert card.is_component_tag

    def test_attributes_also_appear_as_prop_assignments(self) -> None:
        unit = parse_source(PRODUCT_LIST, "ProductList.tsx")
        card = _first(unit.root, NodeKind.JSX_ELEMENT, "ProductCard")

        props = [c for c in card.children if c.kind is NodeKind.PROP_ASSIGNMENT]
        assert [p.name for p in props] == ["key", "product", "onSelect"]
        for prop in props:
            assert prop.children == (card.attributes[prop.name],)

    def test_map_call_and_callback_parameters(self) -> None:
        unit = parse_source(PRODUCT_LIST, "ProductList.tsx")
        call = _first(unit.root, NodeKind.CALL_EXPRESSION, "items.map")

        callback = call.attributes["0"]
        assert callback.kind is NodeKind.ARROW_FUNCTION
        assert callback.attributes["0"].name == "item"

    def test_javascript_parameters(self) -> None:
        source = "const rows = items.map((item, i) => <li key={i}>{item}</li>);\n"
        unit = parse_source(source, "rows.jsx")
        callback = _first(unit.root, NodeKind.CALL_EXPRESSION, "items.map").attributes["0"]
        assert callback.attributes["0"].name == "item"
        assert callback.attributes["1"].name == "i"

    def test_optional_chaining_is_normalized(self) -> None:
        source = "const rows = items?.map((item) => <li key={item.id} />);\n"
        unit = parse_source(source, "rows.tsx")
        assert _first(unit.root, NodeKind.CALL_EXPRESSION).name == "items.map"

    def test_literals_keep_their_kind(self) -> None:
        source = 'const chart = <Chart style={{ width: 10 }} series={[1, 2]} label="x" />;\n'
        unit = parse_source(source, "chart.tsx")
        chart = _first(unit.root, NodeKind.JSX_ELEMENT, "Chart")
        assert chart.attributes["style"].kind is NodeKind.OBJECT_LITERAL
        assert chart.attributes["series"].kind is NodeKind.ARRAY_LITERAL
        assert chart.attributes["label"].kind is NodeKind.OTHER

    def test_spread_attribute(self) -> None:
        unit = parse_source("const el = <Row {...props} />;\n", "row.tsx")
        row = _first(unit.root, NodeKind.JSX_ELEMENT, "Row")
        assert "..." in row.attributes

    def test_member_tag_name(self) -> None:
        source = "const el = <ThemeContext.Provider value={theme}>{children}</ThemeContext.Provider>;\n"
        unit = parse_source(source, "theme.tsx")
        provider = _first(unit.root, NodeKind.JSX_ELEMENT)
        assert provider.name == "ThemeContext.Provider"
        assert provider.is_component_tag

    def test_fragment_has_no_name(self) -> None:
        unit = parse_source("const el = <><span /></>;\n", "frag.tsx")
        fragment = _first(unit.root, NodeKind.JSX_ELEMENT)
        assert fragment.name is None
        assert not fragment.is_component_tag


class TestWrappedDeclarations:
    def test_memo_wrapped_arrow_component(self) -> None:
        source = "const Row = React.memo(({ label }) => <li>{label}</li>);\n"
        unit = parse_source(source, "Row.tsx")
        call = _first(unit.root, NodeKind.CALL_EXPRESSION, "React.memo")
        component = call.attributes["0"]
        assert component.kind is NodeKind.FUNCTION_COMPONENT_DECL
        assert component.name == "Row"

    def test_memo_of_forward_ref(self) -> None:
        source = "const Input = memo(forwardRef((props, ref) => <input ref={ref} />));\n"
        unit = parse_source(source, "Input.tsx")
        memo_call = _first(unit.root, NodeKind.CALL_EXPRESSION, "memo")
        forward = memo_call.attributes["0"]
        assert forward.kind is NodeKind.CALL_EXPRESSION
        assert forward.name == "forwardRef"
        assert forward.attributes["0"].kind is NodeKind.FUNCTION_COMPONENT_DECL
        assert forward.attributes["0"].name == "Input"

    def test_memo_of_named_function_expression(self) -> None:
        source = "export default memo(function Card() { return <div />; });\n"
        unit = parse_source(source, "Card.tsx")
        call = _first(unit.root, NodeKind.CALL_EXPRESSION, "memo")
        assert call.attributes["0"].kind is NodeKind.FUNCTION_COMPONENT_DECL
        assert call.attributes["0"].name == "Card"

    def test_arrow_component_declarator(self) -> None:
        source = "export const Header = ({ title }: { title: string }) => <h1>{title}</h1>;\n"
        unit = parse_source(source, "Header.tsx")
        header = _first(unit.root, NodeKind.FUNCTION_COMPONENT_DECL)
        assert header.name == "Header"


class TestClassComponents:
    @pytest.mark.parametrize(
        "base",
        ["React.Component", "Component", "React.PureComponent", "PureComponent<Props>"],
    )
    def test_component_subclass(self, base: str) -> None:
        source = (
            f"class Clock extends {base} {{\n"
            "  tick() {}\n"
            "  render() { return <span />; }\n"
            "}\n"
        )
        unit = parse_source(source, "Clock.tsx")
        clock = _first(unit.root, NodeKind.CLASS_COMPONENT_DECL)
        assert clock.name == "Clock"
        assert [member.name for member in clock.children] == ["tick", "render"]

    def test_class_expression_in_javascript(self) -> None:
        source = "const Clock = class extends React.Component { render() { return <span />; } };\n"
        unit = parse_source(source, "Clock.jsx")
        clock = _first(unit.root, NodeKind.CLASS_COMPONENT_DECL)
        assert clock.name is None
        assert [member.name for member in clock.children] == ["render"]

    def test_other_classes_are_not_components(self) -> None:
        source = "class Store extends Base { render() { return <span />; } }\nclass Plain {}\n"
        unit = parse_source(source, "store.tsx")
        assert list(iter_nodes(unit.root, NodeKind.CLASS_COMPONENT_DECL)) == []


class TestDeepNesting:
    def test_long_concatenation(self) -> None:
        terms = " + ".join(f"'s{i}'" for i in range(600))
        unit = parse_source(f"export const text = {terms};\n", "text.ts")
        assert unit.line_count == 2

    def test_nested_ternaries(self) -> None:
        chain = " : ".join(f"n === {i} ? 'v{i}'" for i in range(500))
        unit = parse_source(f"const label = (n) => {chain} : 'none';\n", "label.js")
        assert len(list(iter_nodes(unit.root, NodeKind.ARROW_FUNCTION))) == 1

    def test_long_method_chain(self) -> None:
        chain = "".join(f".then((v) => v + {i})" for i in range(500))
        unit = parse_source(f"const done = start(){chain};\n", "chain.ts")
        calls = list(iter_nodes(unit.root, NodeKind.CALL_EXPRESSION))
        assert len(calls) == 501
        assert calls[0].name.endswith(".then")

    def test_deep_jsx_still_finds_list_items(self) -> None:
        depth = 400
        source = (
            "function Tree({ items }) {\n  return "
            + "<div>" * depth
            + "{items.map((i) => <Leaf key={i.id} />)}"
            + "</div>" * depth
            + ";\n}\n"
        )
        unit = parse_source(source, "Tree.tsx")
        leaf = _first(unit.root, NodeKind.JSX_ELEMENT, "Leaf")
        assert leaf.attributes["key"].name == "i.id"


class TestTraversal:
    def test_ancestors_are_outermost_first(self) -> None:
        unit = parse_source(PRODUCT_LIST, "ProductList.tsx")
        for node, ancestors in iter_with_ancestors(unit.root):
            if node.kind is NodeKind.JSX_ELEMENT and node.name == "ProductCard":
                kinds = [a.kind for a in ancestors if a.kind is not NodeKind.OTHER]
                assert kinds == [
                    NodeKind.FUNCTION_COMPONENT_DECL,
                    NodeKind.JSX_ELEMENT,
                    NodeKind.CALL_EXPRESSION,
                    NodeKind.ARROW_FUNCTION,
                ]
                assert ancestors[0] is unit.root
                break
        else:
            pytest.fail("ProductCard not visited")

    def test_root_has_no_ancestors(self) -> None:
        unit = parse_source("const x = 1;\n", "x.ts")
        first_node, ancestors = next(iter_with_ancestors(unit.root))
        assert first_node is unit.root
        assert ancestors == ()

    def test_nodes_are_immutable(self) -> None:
        unit = parse_source(PRODUCT_LIST, "ProductList.tsx")
        card = _first(unit.root, NodeKind.JSX_ELEMENT, "ProductCard")
        with pytest.raises(TypeError):
            card.attributes["key"] = card  # type: ignore[index]


class TestErrors:
    def test_syntax_error_reports_position(self) -> None:
        source = "function App() {\n  return <div>;\n}\n"
        with pytest.raises(ParseError) as exc_info:
            parse_source(source, "App.tsx")
        error = exc_info.value
        assert error.path == "App.tsx"
        assert 1 <= error.line <= 4
        assert error.column >= 1

    def test_parse_file_missing(self, tmp_path: Path) -> None:
        with pytest.raises(ParseError, match="cannot read file"):
            parse_file(tmp_path / "Missing.tsx")

    def test_parse_file_reads_utf8(self, tmp_path: Path) -> None:
        path = tmp_path / "Greeting.tsx"
        path.write_text("export const Greeting = () => <p>héllo</p>;\n", encoding="utf-8")
        unit = parse_file(path)
        assert [n.name for n in iter_nodes(unit.root, NodeKind.FUNCTION_COMPONENT_DECL)] == [
            "Greeting"
        ]

    def test_columns_count_characters(self) -> None:
        source = 'const s = "é"; const el = <Box />;\n'
        unit = parse_source(source, "box.tsx")
        box = _first(unit.root, NodeKind.JSX_ELEMENT, "Box")
        assert box.column == source.index("<Box") + 1
