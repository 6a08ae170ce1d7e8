import logging
from typing import List, Optional, Tuple

from testtraverse.extractors.api_annotation import API_NAME, absorb_api_receiver, annotate_api_call
from testtraverse.extractors.call_chain import resolve_call
from testtraverse.extractors.literals import is_known, literal_value
from testtraverse.models.records import ArgumentDescriptor, CallSite, Span
from testtraverse.syntax import nodes as js
from testtraverse.syntax.walk import iter_nodes

log = logging.getLogger(__name__)


def call_name(call: js.CallExpression) -> Optional[str]:
    name = resolve_call(call)
    return absorb_api_receiver(name, call.callee) if name is not None else None


def _call_site(call: js.CallExpression, name: str, parent: Optional[js.Node]) -> CallSite:
    # simply record kind and position of each argument so callers can target and parse it if required
    arguments = tuple(ArgumentDescriptor(kind=a.kind, start=a.start, end=a.end) for a in call.arguments)

    literal_arguments = {}
    for index, arg in enumerate(call.arguments):
        value = literal_value(arg)
        if is_known(value):
            literal_arguments[index] = value

    annotation = annotate_api_call(name, call)
    callee = call.callee
    return CallSite(
        name=name,
        start=callee.property.start if isinstance(callee, js.MemberExpression) else call.start,
        end=call.end,
        root_start=call.start,
        is_awaited=isinstance(parent, js.AwaitExpression),
        arguments=arguments,
        literal_arguments=literal_arguments or None,
        api_sync_disabled=annotation.sync_disabled,
        api_wait_after=annotation.wait_after,
        errors=annotation.errors,
    )


def find_calls(root: js.Node) -> Tuple[CallSite, ...]:
    """
    Every call made anywhere below `root`, nested callbacks included: a call
    inside a callback passed to another call still belongs to the function
    that lexically contains it.
    """
    calls: List[CallSite] = []
    for call, ancestors in iter_nodes(root, js.CallExpression):
        name = call_name(call)
        if name is None:
            log.debug("skipping unsupported call shape at %d", call.start)
            continue
        if name == API_NAME:
            # handled by the call chained onto it
            continue
        parent = ancestors[-1] if ancestors else None
        calls.append(_call_site(call, name, parent))
    return tuple(calls)


def find_try_blocks(root: js.Node) -> Tuple[Span, ...]:
    spans = (Span(node.start, node.end) for node, _ in iter_nodes(root, js.TryStatement))
    return tuple(sorted(spans, key=lambda s: s.start))
