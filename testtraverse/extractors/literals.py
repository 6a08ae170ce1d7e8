import math
from decimal import Decimal
from typing import Any, Optional, Union

from testtraverse.syntax import nodes as js

# nesting deeper than this is treated as not statically known
MAX_LITERAL_DEPTH = 200


class _Unknown:
    __slots__ = ()

    def __repr__(self):
        return "UNKNOWN"

    def __bool__(self):
        return False


UNKNOWN = _Unknown()


def property_key(prop: js.Node) -> Optional[str]:
    """Key of an object property when written as an identifier or a literal."""
    if not isinstance(prop, js.Property) or prop.computed or prop.key is None:
        return None
    if isinstance(prop.key, js.Identifier):
        return prop.key.name
    if isinstance(prop.key, js.Literal) and prop.key.value is not None:
        return str(prop.key.value)
    return None


def literal_value(node: Optional[js.Node], depth: int = 0) -> Any:
    """
    Statically evaluate `node` when every leaf below it is a literal.

    Objects and arrays evaluate all-or-nothing: one non-literal property value,
    element or key makes the whole expression UNKNOWN. `null` evaluates to
    None, so compare against UNKNOWN with `is`.
    """
    if node is None or depth > MAX_LITERAL_DEPTH:
        return UNKNOWN
    if isinstance(node, js.Literal):
        if isinstance(node.value, float) and not math.isfinite(node.value):
            # 1e400 and friends have no JSON representation
            return UNKNOWN
        return node.value
    if isinstance(node, js.ObjectExpression):
        output = {}
        for prop in node.properties:
            key = property_key(prop)
            if key is None:
                return UNKNOWN
            value = literal_value(prop.value, depth + 1)
            if value is UNKNOWN:
                return UNKNOWN
            output[key] = value
        return output
    if isinstance(node, js.ArrayExpression):
        output = []
        for element in node.elements:
            value = literal_value(element, depth + 1)
            if value is UNKNOWN:
                return UNKNOWN
            output.append(value)
        return output
    return UNKNOWN


def is_known(value: Any) -> bool:
    return value is not UNKNOWN


def number_text(value: Union[int, float]) -> str:
    """A number as JavaScript's String() prints it: 1.50 -> "1.5", 1e-7 -> "1e-7"."""
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    text = repr(value)
    if "e" not in text:
        return text
    mantissa, exponent = text.split("e")
    exponent = int(exponent)
    if -7 < exponent < 21:
        return format(Decimal(text), "f")
    return f"{mantissa}e{'+' if exponent > 0 else '-'}{abs(exponent)}"
