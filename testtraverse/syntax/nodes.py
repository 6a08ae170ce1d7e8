"""
Read-only syntax tree consumed by the extractors.

Only the node kinds the extractors actually look at get a dedicated class;
everything else is an Opaque node that still exposes its children, so calls
nested anywhere in the file are reachable by a generic walk. Kind names
follow ESTree (https://github.com/estree/estree) so the `kind` reported for
call arguments reads the same as in JavaScript tooling.
"""
from dataclasses import dataclass
from typing import Any, Optional, Tuple


@dataclass(frozen=True, eq=False)
class Node:
    start: int
    end: int

    KIND = "Node"

    @property
    def kind(self) -> str:
        return self.KIND

    def children(self) -> Tuple["Node", ...]:
        return ()


def _present(*nodes) -> Tuple[Node, ...]:
    return tuple(n for n in nodes if n is not None)


@dataclass(frozen=True, eq=False)
class Opaque(Node):
    node_kind: str
    child_nodes: Tuple[Node, ...] = ()

    @property
    def kind(self) -> str:
        return self.node_kind

    def children(self):
        return self.child_nodes


@dataclass(frozen=True, eq=False)
class Program(Node):
    body: Tuple[Node, ...]

    KIND = "Program"

    def children(self):
        return self.body


@dataclass(frozen=True, eq=False)
class Identifier(Node):
    name: str

    KIND = "Identifier"


@dataclass(frozen=True, eq=False)
class ThisExpression(Node):
    KIND = "ThisExpression"


@dataclass(frozen=True, eq=False)
class MemberExpression(Node):
    object: Node
    property: Node
    computed: bool = False

    KIND = "MemberExpression"

    def children(self):
        return (self.object, self.property)


@dataclass(frozen=True, eq=False)
class CallExpression(Node):
    callee: Node
    arguments: Tuple[Node, ...]

    KIND = "CallExpression"

    def children(self):
        return (self.callee,) + self.arguments


@dataclass(frozen=True, eq=False)
class AwaitExpression(Node):
    argument: Node

    KIND = "AwaitExpression"

    def children(self):
        return (self.argument,)


@dataclass(frozen=True, eq=False)
class FunctionBase(Node):
    name: Optional[Identifier]
    params: Tuple[Node, ...]
    body: Node
    is_async: bool = False

    def children(self):
        return _present(self.name) + self.params + (self.body,)


@dataclass(frozen=True, eq=False)
class FunctionExpression(FunctionBase):
    KIND = "FunctionExpression"


@dataclass(frozen=True, eq=False)
class ArrowFunctionExpression(FunctionBase):
    KIND = "ArrowFunctionExpression"


@dataclass(frozen=True, eq=False)
class FunctionDeclaration(FunctionBase):
    KIND = "FunctionDeclaration"


FUNCTION_LITERALS = (FunctionExpression, ArrowFunctionExpression)


@dataclass(frozen=True, eq=False)
class Literal(Node):
    value: Any
    raw: str

    KIND = "Literal"


@dataclass(frozen=True, eq=False)
class TemplateLiteral(Node):
    quasis: Tuple[str, ...]
    expressions: Tuple[Node, ...]

    KIND = "TemplateLiteral"

    def children(self):
        return self.expressions


@dataclass(frozen=True, eq=False)
class Property(Node):
    key: Optional[Node]
    value: Node
    computed: bool = False
    shorthand: bool = False

    KIND = "Property"

    def children(self):
        if self.shorthand:
            return (self.value,)
        return _present(self.key) + (self.value,)


@dataclass(frozen=True, eq=False)
class ObjectExpression(Node):
    # Property or SpreadElement (opaque)
    properties: Tuple[Node, ...]

    KIND = "ObjectExpression"

    def children(self):
        return self.properties


@dataclass(frozen=True, eq=False)
class ArrayExpression(Node):
    # None marks a hole, as in [1, , 3]
    elements: Tuple[Optional[Node], ...]

    KIND = "ArrayExpression"

    def children(self):
        return _present(*self.elements)


@dataclass(frozen=True, eq=False)
class VariableDeclarator(Node):
    id: Node
    init: Optional[Node] = None

    KIND = "VariableDeclarator"

    def children(self):
        return _present(self.id, self.init)


@dataclass(frozen=True, eq=False)
class VariableDeclaration(Node):
    declaration_kind: str
    declarations: Tuple[VariableDeclarator, ...]

    KIND = "VariableDeclaration"

    def children(self):
        return self.declarations


@dataclass(frozen=True, eq=False)
class ExportNamedDeclaration(Node):
    declaration: Optional[Node]
    extra: Tuple[Node, ...] = ()

    KIND = "ExportNamedDeclaration"

    def children(self):
        return _present(self.declaration) + self.extra


@dataclass(frozen=True, eq=False)
class ExportDefaultDeclaration(Node):
    declaration: Node

    KIND = "ExportDefaultDeclaration"

    def children(self):
        return (self.declaration,)


@dataclass(frozen=True, eq=False)
class TryStatement(Node):
    block: Node
    handler: Optional[Node] = None
    finalizer: Optional[Node] = None

    KIND = "TryStatement"

    def children(self):
        return _present(self.block, self.handler, self.finalizer)
