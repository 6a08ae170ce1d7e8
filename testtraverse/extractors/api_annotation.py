"""
Special handling of the `api({ sync: ?, waitAfter: ? }).regionCall(...)`
convention.

The `api(...)` call only configures the call chained onto it, so it is never
reported on its own; its configuration is attached to the chained call
instead, and its `()` marker is dropped from that call's name
(`api({...}).submit()` is reported as `api.submit`).
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from testtraverse.extractors.literals import property_key
from testtraverse.models.records import DeferredError
from testtraverse.syntax import nodes as js

log = logging.getLogger(__name__)

API_NAME = "api"
API_PREFIX = "api."
_RECEIVER_PREFIX = "api()."


@dataclass(frozen=True)
class ApiAnnotation:
    sync_disabled: bool = False
    wait_after: bool = False
    errors: Tuple[DeferredError, ...] = ()


NO_ANNOTATION = ApiAnnotation()


def is_api_receiver(node: js.Node) -> bool:
    """True for a call of plain `api` with zero or one argument."""
    return (
        isinstance(node, js.CallExpression)
        and isinstance(node.callee, js.Identifier)
        and node.callee.name == API_NAME
        and len(node.arguments) <= 1
    )


def chain_receiver(callee: js.Node) -> Optional[js.CallExpression]:
    """The innermost call of a callee chain: `a` in `a().b.c`."""
    receiver = None
    node = callee
    while True:
        if isinstance(node, js.MemberExpression):
            node = node.object
        elif isinstance(node, js.CallExpression):
            receiver = node
            node = node.callee
        else:
            return receiver


def absorb_api_receiver(name: str, callee: js.Node) -> str:
    """
    `api().submit` becomes `api.submit` when the chain starts with an
    `api(...)` call of the configuring shape. Other receivers, such as
    `api(a, b)`, keep their `()` marker.
    """
    if name.startswith(_RECEIVER_PREFIX) and is_api_receiver(chain_receiver(callee)):
        return API_PREFIX + name[len(_RECEIVER_PREFIX):]
    return name


def _literal_boolean(prop: js.Property, key: str, errors: List[DeferredError]) -> Optional[bool]:
    value = prop.value
    if isinstance(value, js.Literal) and isinstance(value.value, bool):
        return value.value
    errors.append(DeferredError(
        message=f'"{key}" property is expected to have literal Boolean value (true/false)',
        location=value.start,
    ))
    log.debug("non-literal %r value for api() at %d", key, value.start)
    return None


def annotate_api_call(name: str, call: js.CallExpression) -> ApiAnnotation:
    """
    Reads the configuration of `api({...}).method(...)` for the call to
    `method`. Calls whose receiver is not an `api(...)` call, like
    `api.central.foo()`, carry no configuration.
    """
    if not name.startswith(API_PREFIX):
        return NO_ANNOTATION
    callee = call.callee
    if not isinstance(callee, js.MemberExpression) or not is_api_receiver(callee.object):
        return NO_ANNOTATION
    receiver_args = callee.object.arguments
    if not receiver_args or not isinstance(receiver_args[0], js.ObjectExpression):
        return NO_ANNOTATION

    sync_disabled = False
    wait_after = False
    errors: List[DeferredError] = []
    for prop in receiver_args[0].properties:
        key = property_key(prop)
        if key == "sync":
            if _literal_boolean(prop, key, errors) is False:
                sync_disabled = True
        elif key == "waitAfter":
            if _literal_boolean(prop, key, errors) is True:
                wait_after = True
    return ApiAnnotation(sync_disabled=sync_disabled, wait_after=wait_after, errors=tuple(errors))
