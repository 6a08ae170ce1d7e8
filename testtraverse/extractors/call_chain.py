from typing import List, Optional

from testtraverse.syntax import nodes as js


def resolve_callee(callee: js.Node) -> Optional[str]:
    """
    Returns the dotted representation of a callee, e.g.
      - "Cypress.Commands.add"
      - "cy.funcA().funcB"
      - "this.helper"

    Returns None when the chain is rooted in something other than an
    identifier or `this` ([...].sort, "...".repeat, new Blah().x, ...) or uses
    computed member access. Those call shapes are not supported and callers
    skip them.
    """
    parts: List[str] = []
    node = callee
    while True:
        if isinstance(node, js.Identifier):
            parts.append(node.name)
            break
        if isinstance(node, js.ThisExpression):
            parts.append("this")
            break
        if isinstance(node, js.MemberExpression):
            if node.computed or not isinstance(node.property, js.Identifier):
                return None
            parts.append("." + node.property.name)
            node = node.object
        elif isinstance(node, js.CallExpression):
            parts.append("()")
            node = node.callee
        else:
            return None
    return "".join(reversed(parts))


def resolve_call(call: js.CallExpression) -> Optional[str]:
    return resolve_callee(call.callee)
