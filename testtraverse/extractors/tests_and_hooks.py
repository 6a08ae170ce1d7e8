import logging
from typing import Dict, List, Optional, Tuple

from testtraverse.config import SUPPORTED_HOOKS
from testtraverse.extractors.call_sites import call_name, find_calls, find_try_blocks
from testtraverse.extractors.scope import aggregate_modifiers, enclosing_frames, is_test_identifier
from testtraverse.models.records import HookCase, TestCase
from testtraverse.syntax import nodes as js
from testtraverse.syntax.walk import iter_nodes

log = logging.getLogger(__name__)

Hooks = Dict[str, Tuple[HookCase, ...]]


def _test_case(call: js.CallExpression, name: str, ancestors) -> TestCase:
    func = call.arguments[1]
    scope = enclosing_frames(ancestors)
    modifiers = aggregate_modifiers(scope, name)
    return TestCase(
        scope=scope,
        start=call.start,
        end=call.end,
        function_start=func.start,
        function_end=func.end,
        is_async=isinstance(func, js.FunctionBase) and func.is_async,
        calls=find_calls(func),
        try_blocks=find_try_blocks(func),
        skip=modifiers.skip,
        only=modifiers.only,
        ios_only=modifiers.ios_only,
        android_only=modifiers.android_only,
    )


def _hook_case(call: js.CallExpression, name: str, ancestors) -> Optional[HookCase]:
    # Watch out for false positives. With the wrong number of params, or a
    # non-function param, this is not a hook.
    if len(call.arguments) != 1:
        return None
    func = call.arguments[0]
    if not isinstance(func, js.FUNCTION_LITERALS):
        return None

    scope = enclosing_frames(ancestors)
    # hooks declared inside a single it() are not hooks of any group
    if any(is_test_identifier(frame.callee) for frame in scope):
        log.debug("ignoring %s nested in a test at %d", name, call.start)
        return None

    modifiers = aggregate_modifiers(scope, name)
    return HookCase(
        scope=scope,
        start=call.start,
        end=call.end,
        function_start=func.start,
        function_end=func.end,
        is_async=func.is_async,
        calls=find_calls(func),
        try_blocks=find_try_blocks(func),
        skip=modifiers.skip,
        only=modifiers.only,
        ios_only=modifiers.ios_only,
        android_only=modifiers.android_only,
        hook=name,
    )


def find_tests(program: Optional[js.Program]) -> Tuple[Tuple[TestCase, ...], Hooks]:
    """
    Single pass over a file's tree collecting test cases (it, it.only,
    it.skip, ...) and the beforeAll/beforeEach/afterAll/afterEach hooks.

    Returns (tests, hooks) with hooks keyed by hook name. A missing tree
    yields no records.
    """
    tests: List[TestCase] = []
    hooks: Dict[str, List[HookCase]] = {hook: [] for hook in SUPPORTED_HOOKS}
    if program is None:
        return (), {hook: () for hook in hooks}

    for call, ancestors in iter_nodes(program, js.CallExpression):
        name = call_name(call)
        if name is None:
            continue
        if is_test_identifier(name):
            if len(call.arguments) < 2:
                continue
            tests.append(_test_case(call, name, ancestors))
        elif name in SUPPORTED_HOOKS:
            hook = _hook_case(call, name, ancestors)
            if hook is not None:
                hooks[name].append(hook)

    return tuple(tests), {hook: tuple(cases) for hook, cases in hooks.items()}
