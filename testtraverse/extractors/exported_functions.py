"""
Exported function discovery.

For simplicity, only these forms of function declaration + export are
supported:

    export async function a() {}

    export const b = async () => {};

    const c = async () => {};
    export default c;

    async function d() {}
    export default d;
"""
from typing import List, Optional, Tuple

from testtraverse.errors import ParseLimitationsError
from testtraverse.extractors.call_sites import find_calls
from testtraverse.models.records import ExportedFunction
from testtraverse.syntax import nodes as js

MULTI_DECLARATOR_MESSAGE = "No support for function export within multi-variable declaration"


def _default_export(program: js.Program) -> Optional[js.ExportDefaultDeclaration]:
    """The first `export default x;` statement exporting a plain identifier."""
    for node in program.body:
        if isinstance(node, js.ExportDefaultDeclaration) and isinstance(node.declaration, js.Identifier):
            return node
    return None


def _declarator_name(declarator: js.VariableDeclarator) -> Optional[str]:
    return declarator.id.name if isinstance(declarator.id, js.Identifier) else None


class ExportedFunctionFinder:
    def __init__(self, program: js.Program):
        self.program = program
        self.default_export = _default_export(program)
        self.default_name = self.default_export.declaration.name if self.default_export else None
        self.functions: List[ExportedFunction] = []

    def _register(self, name: str, func: js.FunctionBase, start: int, end: int,
                  export_start: int, export_end: int) -> None:
        self.functions.append(ExportedFunction(
            name=name,
            start=start,
            end=end,
            export_start=export_start,
            export_end=export_end,
            function_start=func.body.start,
            function_end=func.body.end,
            is_async=func.is_async,
            calls=find_calls(func.body),
        ))

    def _register_declaration(self, node: js.FunctionDeclaration, export_start: int, export_end: int,
                              start: int, end: int) -> None:
        if node.name is None:
            return
        self._register(node.name.name, node, start, end, export_start, export_end)

    def _maybe_register_variables(self, node: js.VariableDeclaration, start: int, end: int,
                                  export: Optional[js.Node] = None) -> None:
        declarations = node.declarations
        has_arrow = any(isinstance(d.init, js.ArrowFunctionExpression) for d in declarations)
        if not has_arrow:
            return
        matches_default = self.default_name is not None and any(
            _declarator_name(d) == self.default_name for d in declarations
        )
        if export is None and not matches_default:
            return

        if len(declarations) > 1:
            # refuse to guess which declarator was meant, e.g. "export const x = () => {}, y = 100"
            raise ParseLimitationsError(MULTI_DECLARATOR_MESSAGE, declarations[1].start)

        # at this point there is exactly one declarator, it is an arrow
        # function, and it is either exported directly or default exported
        declarator = declarations[0]
        name = _declarator_name(declarator)
        if name is None:
            return
        export = export or self.default_export
        self._register(name, declarator.init, start, end, export.start, export.end)

    def find(self) -> Tuple[ExportedFunction, ...]:
        for node in self.program.body:
            if isinstance(node, js.ExportNamedDeclaration) and node.declaration is not None:
                declaration = node.declaration
                if isinstance(declaration, js.FunctionDeclaration):
                    # export async function a() {}
                    self._register_declaration(declaration, node.start, node.end, node.start, node.end)
                elif isinstance(declaration, js.VariableDeclaration) and declaration.declaration_kind == "const":
                    # maybe export const b = async () => {};
                    self._maybe_register_variables(declaration, node.start, node.end, export=node)
            elif isinstance(node, js.VariableDeclaration) and node.declaration_kind == "const":
                # maybe const c = async () => {}; if c is default exported
                self._maybe_register_variables(node, node.start, node.end)
            elif (isinstance(node, js.FunctionDeclaration) and self.default_name is not None
                  and node.name is not None and node.name.name == self.default_name):
                # async function d() {}; if d is default exported
                self._register_declaration(node, self.default_export.start, self.default_export.end,
                                           node.start, node.end)
        return tuple(self.functions)


def find_exported_functions(program: Optional[js.Program]) -> Tuple[ExportedFunction, ...]:
    """
    Raises ParseLimitationsError when a matching function sits in a
    multi-declarator const statement.
    """
    if program is None:
        return ()
    return ExportedFunctionFinder(program).find()
