import re
from typing import List, Optional, Tuple

from tree_sitter import Parser
from tree_sitter_language_pack import get_parser

from testtraverse.errors import SourceSyntaxError
from testtraverse.syntax import nodes as js

# ---------------------------
# Node type tables
# ---------------------------

SKIPPED_TYPES = {"comment", "html_comment", "hash_bang_line"}

IDENTIFIER_TYPES = {
    "identifier",
    "property_identifier",
    "private_property_identifier",
    "shorthand_property_identifier",
    "statement_identifier",
    "undefined",
}

FUNCTION_EXPRESSION_TYPES = {"function", "function_expression", "generator_function"}
FUNCTION_DECLARATION_TYPES = {"function_declaration", "generator_function_declaration"}

# tree-sitter type -> ESTree kind, where the camel-cased type would read wrong
KIND_NAMES = {
    "statement_block": "BlockStatement",
    "ternary_expression": "ConditionalExpression",
    "class": "ClassExpression",
    "regex": "RegExpLiteral",
    "array_pattern": "ArrayPattern",
    "object_pattern": "ObjectPattern",
    "rest_pattern": "RestElement",
    "assignment_pattern": "AssignmentPattern",
    "augmented_assignment_expression": "AssignmentExpression",
    "catch_clause": "CatchClause",
    "finally_clause": "BlockStatement",
    "super": "Super",
}

# ---------------------------
# Literal decoding helpers
# ---------------------------

_ESCAPE_RE = re.compile(r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|[0-7]{1,3}|\r\n|[\s\S])")
_SIMPLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v"}
_LINE_CONTINUATIONS = {"\n", "\r", "\r\n", "\u2028", "\u2029"}


def kind_name(ts_type: str) -> str:
    if ts_type in KIND_NAMES:
        return KIND_NAMES[ts_type]
    return "".join(part.capitalize() for part in ts_type.split("_"))


def _unescape(match) -> str:
    esc = match.group(1)
    try:
        if esc.startswith("u{"):
            return chr(int(esc[2:-1], 16))
        if len(esc) == 5 and esc[0] == "u":
            return chr(int(esc[1:], 16))
        if len(esc) == 3 and esc[0] == "x":
            return chr(int(esc[1:], 16))
    except ValueError:
        return esc
    if esc[0] in "01234567":
        return chr(int(esc, 8))
    if esc in _LINE_CONTINUATIONS:
        return ""
    return _SIMPLE_ESCAPES.get(esc, esc)


def decode_js_string(body: str) -> str:
    """Decode the escapes of a string literal body (quotes already stripped)."""
    value = _ESCAPE_RE.sub(_unescape, body)
    if any("\ud800" <= ch <= "\udfff" for ch in value):
        # \uD83D\uDE00 style pairs -> one code point
        try:
            value = value.encode("utf-16", "surrogatepass").decode("utf-16")
        except UnicodeDecodeError:
            pass
    return value


def parse_js_number(raw: str):
    text = raw.replace("_", "")
    if text.endswith("n"):
        text = text[:-1]
        return int(text, 0) if text[:2].lower() in ("0x", "0o", "0b") else int(text)
    lowered = text.lower()
    if lowered.startswith(("0x", "0o", "0b")):
        return int(lowered, 0)
    if len(text) > 1 and text[0] == "0" and text.isdigit():
        # legacy octal literal such as 017; 089 is decimal
        return int(text, 8) if all(c in "01234567" for c in text) else int(text)
    value = float(text)
    return int(value) if value.is_integer() else value


# ---------------------------
# Offsets
# ---------------------------

class OffsetTranslator:
    """Maps Tree-sitter byte offsets back to character offsets in the source."""

    def __init__(self, source: str, data: bytes):
        if len(data) == len(source):
            self._table: Optional[List[int]] = None
            return
        table = [0] * (len(data) + 1)
        pos = 0
        for index, char in enumerate(source):
            width = len(char.encode("utf-8", "surrogatepass"))
            for k in range(width):
                table[pos + k] = index
            pos += width
        table[pos] = len(source)
        self._table = table

    def __call__(self, byte_offset: int) -> int:
        if self._table is None:
            return byte_offset
        return self._table[byte_offset]


# ---------------------------
# Builder
# ---------------------------

class SyntaxTreeBuilder:
    """
    Converts a Tree-sitter concrete syntax tree for JavaScript into the
    tagged node model of testtraverse.syntax.nodes.

    Conversion runs on an explicit stack so that long call chains and
    deeply nested expressions never hit the interpreter's recursion limit.
    Each node kind has an `inputs` function naming the Tree-sitter children
    it needs converted (None for an absent optional child) and a `build`
    function that receives those children, converted, in the same order.
    """

    def __init__(self, source: str, data: bytes):
        self.source = source
        self.data = data
        self.to_char = OffsetTranslator(source, data)
        self.inputs = {
            "identifier": self._no_inputs,
            "function_expression": self._function_inputs,
            "function_declaration": self._function_inputs,
            "this": self._no_inputs,
            "member_expression": self._member_inputs,
            "subscript_expression": self._subscript_inputs,
            "call_expression": self._call_inputs,
            "arrow_function": self._function_inputs,
            "method_definition": self._method_inputs,
            "string": self._no_inputs,
            "number": self._no_inputs,
            "true": self._no_inputs,
            "false": self._no_inputs,
            "null": self._no_inputs,
            "template_string": self._template_inputs,
            "object": self._object_inputs,
            "array": self._array_inputs,
            "lexical_declaration": self._declaration_inputs,
            "variable_declaration": self._declaration_inputs,
            "variable_declarator": self._declarator_inputs,
            "export_statement": self._export_inputs,
            "try_statement": self._try_inputs,
        }
        self.builders = {
            "identifier": self._identifier,
            "function_expression": self._function_expression,
            "function_declaration": self._function_declaration,
            "program": self._program,
            "this": self._this,
            "member_expression": self._member,
            "subscript_expression": self._subscript,
            "call_expression": self._call,
            "await_expression": self._await,
            "parenthesized_expression": self._parenthesized,
            "arrow_function": self._arrow,
            "method_definition": self._method,
            "string": self._string,
            "number": self._number,
            "true": self._true,
            "false": self._false,
            "null": self._null,
            "template_string": self._template,
            "object": self._object,
            "array": self._array,
            "lexical_declaration": self._lexical_declaration,
            "variable_declaration": self._variable_declaration,
            "variable_declarator": self._declarator,
            "export_statement": self._export,
            "try_statement": self._try,
        }

    # ------------- helpers -------------

    def get_text(self, node) -> str:
        return self.data[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

    def _slice(self, start_byte: int, end_byte: int) -> str:
        return self.data[start_byte:end_byte].decode("utf-8", errors="replace")

    def _span(self, node) -> Tuple[int, int]:
        return self.to_char(node.start_byte), self.to_char(node.end_byte)

    def _named(self, node) -> list:
        return [c for c in node.named_children if c.type not in SKIPPED_TYPES]

    def _has_token(self, node, token: str) -> bool:
        return any(ch.type == token for ch in node.children)

    def _kind_key(self, node) -> str:
        if node.type in IDENTIFIER_TYPES:
            return "identifier"
        if node.is_named and node.type in FUNCTION_EXPRESSION_TYPES:
            return "function_expression"
        if node.type in FUNCTION_DECLARATION_TYPES:
            return "function_declaration"
        return node.type

    # ------------- public -------------

    def check_errors(self, root) -> None:
        if not root.has_error:
            return
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == "ERROR" or node.is_missing:
                if node.is_missing:
                    message = f"Expected {node.type!r}"
                else:
                    snippet = self.get_text(node).strip().splitlines()
                    message = f"Unexpected token {snippet[0][:20]!r}" if snippet else "Unexpected token"
                raise SourceSyntaxError(message, self.to_char(node.start_byte))
            if node.has_error:
                stack.extend(reversed(node.children))
        raise SourceSyntaxError("Unparseable source", 0)

    def build(self, root) -> js.Program:
        return self.convert(root)

    def convert(self, root) -> js.Node:
        # post-order: a node is built once every input below it has been,
        # and each finished subtree leaves exactly one value on `values`
        values: List[js.Node] = []
        stack = [(root, None)]
        while stack:
            node, inputs = stack.pop()
            key = self._kind_key(node)
            if inputs is None:
                inputs = self.inputs.get(key, self._named)(node)
                stack.append((node, inputs))
                for child in reversed(inputs):
                    if child is not None:
                        stack.append((child, None))
                continue
            count = sum(1 for child in inputs if child is not None)
            converted = iter(values[len(values) - count:])
            del values[len(values) - count:]
            parts = [next(converted) if child is not None else None for child in inputs]
            values.append(self.builders.get(key, self._generic)(node, parts))
        return values[0]

    # ------------- inputs -------------

    def _no_inputs(self, node) -> list:
        return []

    def _param_nodes(self, node) -> list:
        params = node.child_by_field_name("parameters")
        if params is not None:
            return self._named(params)
        single = node.child_by_field_name("parameter")
        return [single] if single is not None else []

    def _function_inputs(self, node) -> list:
        return [node.child_by_field_name("name")] + self._param_nodes(node) + [node.child_by_field_name("body")]

    def _method_inputs(self, node) -> list:
        # the name of a method is its property key, not a function name
        return [None] + self._param_nodes(node) + [node.child_by_field_name("body")]

    def _member_inputs(self, node) -> list:
        return [node.child_by_field_name("object"), node.child_by_field_name("property")]

    def _subscript_inputs(self, node) -> list:
        return [node.child_by_field_name("object"), node.child_by_field_name("index")]

    def _is_tagged_template(self, node) -> bool:
        args = node.child_by_field_name("arguments")
        return args is None or args.type != "arguments"

    def _call_inputs(self, node) -> list:
        if self._is_tagged_template(node):
            return self._named(node)
        return [node.child_by_field_name("function")] + self._named(node.child_by_field_name("arguments"))

    def _substitutions(self, node) -> list:
        return [c for c in node.named_children if c.type == "template_substitution"]

    def _template_inputs(self, node) -> list:
        inputs = []
        for child in self._substitutions(node):
            inner = self._named(child)
            inputs.append(inner[0] if inner else child)
        return inputs

    def _key_input(self, key_node):
        if key_node is not None and key_node.type == "computed_property_name":
            inner = self._named(key_node)
            return inner[0] if inner else None
        return key_node

    def _object_inputs(self, node) -> list:
        inputs = []
        for child in self._named(node):
            if child.type == "pair":
                inputs.append(self._key_input(child.child_by_field_name("key")))
                inputs.append(child.child_by_field_name("value"))
            elif child.type == "method_definition":
                inputs.append(self._key_input(child.child_by_field_name("name")))
                inputs.append(child)
            else:
                inputs.append(child)
        return inputs

    def _array_items(self, node) -> list:
        return [c for c in node.children if c.type not in SKIPPED_TYPES and c.type not in ("[", "]")]

    def _array_inputs(self, node) -> list:
        return [c for c in self._array_items(node) if c.type != ","]

    def _declaration_inputs(self, node) -> list:
        return [c for c in self._named(node) if c.type == "variable_declarator"]

    def _declarator_inputs(self, node) -> list:
        return [node.child_by_field_name("name"), node.child_by_field_name("value")]

    def _export_target(self, node):
        declaration = node.child_by_field_name("declaration")
        if self._has_token(node, "default"):
            return declaration or node.child_by_field_name("value")
        return declaration

    def _export_inputs(self, node) -> list:
        target = self._export_target(node)
        return [target] if target is not None else self._named(node)

    def _try_inputs(self, node) -> list:
        return [
            node.child_by_field_name("body"),
            node.child_by_field_name("handler"),
            node.child_by_field_name("finalizer"),
        ]

    # ------------- builders -------------

    def _generic(self, node, parts) -> js.Node:
        children = tuple(p for p in parts if p is not None)
        return js.Opaque(*self._span(node), node_kind=kind_name(node.type), child_nodes=children)

    def _identifier(self, node, parts):
        return js.Identifier(*self._span(node), name=self.get_text(node))

    def _program(self, node, parts):
        return js.Program(*self._span(node), body=tuple(parts))

    def _this(self, node, parts):
        return js.ThisExpression(*self._span(node))

    def _member(self, node, parts):
        return js.MemberExpression(*self._span(node), object=parts[0], property=parts[1])

    def _subscript(self, node, parts):
        return js.MemberExpression(*self._span(node), object=parts[0], property=parts[1], computed=True)

    def _call(self, node, parts):
        if self._is_tagged_template(node):
            # tag`...`
            return js.Opaque(*self._span(node), node_kind="TaggedTemplateExpression", child_nodes=tuple(parts))
        return js.CallExpression(*self._span(node), callee=parts[0], arguments=tuple(parts[1:]))

    def _await(self, node, parts):
        if not parts:
            return self._generic(node, parts)
        return js.AwaitExpression(*self._span(node), argument=parts[0])

    def _parenthesized(self, node, parts):
        if len(parts) != 1:
            return self._generic(node, parts)
        return parts[0]

    def _function(self, node, parts, cls):
        return cls(
            *self._span(node),
            name=parts[0],
            params=tuple(parts[1:-1]),
            body=parts[-1],
            is_async=self._has_token(node, "async"),
        )

    def _function_expression(self, node, parts):
        return self._function(node, parts, js.FunctionExpression)

    def _function_declaration(self, node, parts):
        return self._function(node, parts, js.FunctionDeclaration)

    def _arrow(self, node, parts):
        return self._function(node, parts, js.ArrowFunctionExpression)

    def _method(self, node, parts):
        return self._function(node, parts, js.FunctionExpression)

    def _string(self, node, parts):
        raw = self.get_text(node)
        return js.Literal(*self._span(node), value=decode_js_string(raw[1:-1]), raw=raw)

    def _number(self, node, parts):
        raw = self.get_text(node)
        return js.Literal(*self._span(node), value=parse_js_number(raw), raw=raw)

    def _true(self, node, parts):
        return js.Literal(*self._span(node), value=True, raw="true")

    def _false(self, node, parts):
        return js.Literal(*self._span(node), value=False, raw="false")

    def _null(self, node, parts):
        return js.Literal(*self._span(node), value=None, raw="null")

    def _template(self, node, parts):
        quasis: List[str] = []
        cursor = node.start_byte + 1
        for child in self._substitutions(node):
            quasis.append(self._slice(cursor, child.start_byte))
            cursor = child.end_byte
        quasis.append(self._slice(cursor, node.end_byte - 1))
        return js.TemplateLiteral(*self._span(node), quasis=tuple(quasis), expressions=tuple(parts))

    def _is_computed(self, key_node) -> bool:
        return key_node is not None and key_node.type == "computed_property_name"

    def _object(self, node, parts):
        remaining = iter(parts)
        properties: List[js.Node] = []
        for child in self._named(node):
            if child.type in ("pair", "method_definition"):
                key_node = child.child_by_field_name("key" if child.type == "pair" else "name")
                key, value = next(remaining), next(remaining)
                properties.append(js.Property(
                    *self._span(child), key=key, value=value, computed=self._is_computed(key_node)
                ))
            elif child.type == "shorthand_property_identifier":
                ident = next(remaining)
                properties.append(js.Property(*self._span(child), key=ident, value=ident, shorthand=True))
            else:
                properties.append(next(remaining))
        return js.ObjectExpression(*self._span(node), properties=tuple(properties))

    def _array(self, node, parts):
        remaining = iter(parts)
        elements: List[Optional[js.Node]] = []
        expecting = True
        for child in self._array_items(node):
            if child.type == ",":
                if expecting:
                    elements.append(None)
                expecting = True
                continue
            elements.append(next(remaining))
            expecting = False
        return js.ArrayExpression(*self._span(node), elements=tuple(elements))

    def _lexical_declaration(self, node, parts):
        return js.VariableDeclaration(
            *self._span(node),
            declaration_kind=node.children[0].type,
            declarations=tuple(parts),
        )

    def _variable_declaration(self, node, parts):
        return js.VariableDeclaration(*self._span(node), declaration_kind="var", declarations=tuple(parts))

    def _declarator(self, node, parts):
        return js.VariableDeclarator(*self._span(node), id=parts[0], init=parts[1])

    def _export(self, node, parts):
        target = self._export_target(node)
        if self._has_token(node, "default"):
            if target is None:
                return self._generic(node, parts)
            return js.ExportDefaultDeclaration(*self._span(node), declaration=parts[0])
        if target is not None:
            return js.ExportNamedDeclaration(*self._span(node), declaration=parts[0])
        return js.ExportNamedDeclaration(*self._span(node), declaration=None, extra=tuple(parts))

    def _try(self, node, parts):
        return js.TryStatement(*self._span(node), block=parts[0], handler=parts[1], finalizer=parts[2])


def parse_javascript(source: str, parser: Optional[Parser] = None) -> js.Program:
    """
    Parse JavaScript module source into a js.Program.

    All offsets in the returned tree are character offsets into `source`.
    Raises SourceSyntaxError when the source does not parse cleanly.
    """
    if source.startswith("\ufeff"):
        # keep offsets aligned with the original text
        source = " " + source[1:]
    parser = parser or get_parser("javascript")
    data = source.encode("utf-8", "surrogatepass")
    tree = parser.parse(data)
    builder = SyntaxTreeBuilder(source, data)
    builder.check_errors(tree.root_node)
    return builder.build(tree.root_node)
