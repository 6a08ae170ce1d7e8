import pytest

from testtraverse.errors import SourceSyntaxError
from testtraverse.syntax import nodes as js
from testtraverse.syntax.treesitter_builder import decode_js_string, kind_name, parse_js_number
from testtraverse.syntax.walk import iter_nodes


def first_arg(outermost_call, source):
    return outermost_call(source).arguments[0]


def test_call_with_member_callee(outermost_call):
    call = outermost_call('cy.get("a", 1)')
    assert isinstance(call, js.CallExpression)
    assert isinstance(call.callee, js.MemberExpression)
    assert call.callee.object.name == "cy"
    assert call.callee.property.name == "get"
    assert call.callee.property.start == 3
    assert (call.start, call.end) == (0, 14)
    assert [a.kind for a in call.arguments] == ["Literal", "Literal"]


def test_comments_are_dropped(outermost_call):
    call = outermost_call("foo(/* first */ 1, // second\n 2)")
    assert [a.value for a in call.arguments] == [1, 2]


def test_subscript_is_computed_member(outermost_call):
    call = outermost_call("a[0]()")
    assert isinstance(call.callee, js.MemberExpression)
    assert call.callee.computed


@pytest.mark.parametrize("raw,expected", [
    ("'plain'", "plain"),
    ('"a\\nb"', "a\nb"),
    ("'it\\'s'", "it's"),
    ('"\\u00e9t\\u00e9"', "été"),
    ('"\\u{1F600}"', "\U0001F600"),
    ('"\\uD83D\\uDE00"', "\U0001F600"),
    ('"\\x41"', "A"),
])
def test_string_literals(outermost_call, raw, expected):
    arg = first_arg(outermost_call, f"f({raw})")
    assert isinstance(arg, js.Literal)
    assert arg.value == expected
    assert arg.raw == raw


@pytest.mark.parametrize("raw,expected", [
    ("42", 42),
    ("1.5", 1.5),
    ("1_000", 1000),
    ("0x10", 16),
    ("0b11", 3),
    ("0o17", 15),
    ("10n", 10),
    ("1e3", 1000),
])
def test_number_literals(raw, expected):
    assert parse_js_number(raw) == expected


def test_keyword_literals(outermost_call):
    call = outermost_call("f(true, false, null, undefined)")
    values = [a.value for a in call.arguments[:3]]
    assert values == [True, False, None]
    assert isinstance(call.arguments[3], js.Identifier)
    assert call.arguments[3].name == "undefined"


def test_decode_line_continuation():
    assert decode_js_string("a\\\nb") == "ab"


def test_template_literal_quasis(outermost_call):
    arg = first_arg(outermost_call, "f(`a${b}c${d.e}`)")
    assert isinstance(arg, js.TemplateLiteral)
    assert arg.quasis == ("a", "c", "")
    assert isinstance(arg.expressions[0], js.Identifier)
    assert isinstance(arg.expressions[1], js.MemberExpression)


def test_object_properties(outermost_call):
    arg = first_arg(outermost_call, 'f({ a: 1, "b": 2, [c]: 3, d, ...e, m() {} })')
    assert isinstance(arg, js.ObjectExpression)
    a, b, c, d, e, m = arg.properties
    assert a.key.name == "a" and a.value.value == 1
    assert b.key.value == "b"
    assert c.computed
    assert d.shorthand and d.value.name == "d"
    assert e.kind == "SpreadElement"
    assert isinstance(m.value, js.FunctionExpression)


def test_array_holes(outermost_call):
    arg = first_arg(outermost_call, "f([1, , 2,])")
    assert isinstance(arg, js.ArrayExpression)
    assert len(arg.elements) == 3
    assert arg.elements[1] is None


def test_parentheses_are_unwrapped(parse):
    program = parse("async function f() { await (foo()); }")
    awaits = [n for n, _ in iter_nodes(program, js.AwaitExpression)]
    assert isinstance(awaits[0].argument, js.CallExpression)


def test_functions(parse):
    program = parse("async function a() {}\nconst b = async x => x;\nconst c = function () {};")
    decl = program.body[0]
    assert isinstance(decl, js.FunctionDeclaration)
    assert decl.name.name == "a"
    assert decl.is_async
    arrow = program.body[1].declarations[0].init
    assert isinstance(arrow, js.ArrowFunctionExpression)
    assert arrow.is_async
    assert len(arrow.params) == 1
    func = program.body[2].declarations[0].init
    assert isinstance(func, js.FunctionExpression)
    assert not func.is_async


def test_export_forms(parse):
    program = parse("export const a = 1;\nexport default a;\nexport { a as b };")
    named, default, clause = program.body
    assert isinstance(named, js.ExportNamedDeclaration)
    assert isinstance(named.declaration, js.VariableDeclaration)
    assert named.declaration.declaration_kind == "const"
    assert isinstance(default, js.ExportDefaultDeclaration)
    assert default.declaration.name == "a"
    assert isinstance(clause, js.ExportNamedDeclaration)
    assert clause.declaration is None


def test_try_statement(parse):
    program = parse("try { a(); } catch (e) { b(); } finally { c(); }")
    stmt = program.body[0]
    assert isinstance(stmt, js.TryStatement)
    assert stmt.handler is not None and stmt.finalizer is not None


def test_character_offsets_for_non_ascii(parse):
    source = 'const s = "été"; foo();'
    calls = [n for n, _ in iter_nodes(parse(source), js.CallExpression)]
    assert calls[0].start == source.index("foo()")
    assert calls[0].end == source.index("foo()") + len("foo()")


def test_byte_order_mark_keeps_offsets(parse):
    calls = [n for n, _ in iter_nodes(parse("\ufefffoo();"), js.CallExpression)]
    assert calls[0].start == 1


def test_syntax_error(parse):
    with pytest.raises(SourceSyntaxError) as exc:
        parse('describe("x", () => {\n  it("y", () => {\n')
    assert isinstance(exc.value.offset, int)


def test_opaque_kind_names():
    assert kind_name("new_expression") == "NewExpression"
    assert kind_name("statement_block") == "BlockStatement"
    assert kind_name("ternary_expression") == "ConditionalExpression"


def test_long_call_chain_from_source(parse):
    links = 3000
    program = parse("cy" + ".then(f)" * links + ";")
    calls = [n for n, _ in iter_nodes(program, js.CallExpression)]
    assert len(calls) == links
    outer = max(calls, key=lambda c: c.end)
    assert outer.end == len("cy" + ".then(f)" * links)


def test_long_concatenation_from_source(parse):
    terms = 3000
    source = "f(" + " + ".join(['"a"'] * terms) + ");"
    call = next(n for n, _ in iter_nodes(parse(source), js.CallExpression))
    assert call.arguments[0].kind == "BinaryExpression"
    literals = [n for n, _ in iter_nodes(call, js.Literal)]
    assert len(literals) == terms
