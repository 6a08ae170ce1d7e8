"""
Plain output records. Created once per traversal, never mutated, and holding
no references back into the syntax tree.

`to_dict()` gives the JSON shape consumed by downstream rules: camelCase
keys, boolean flags present only when true.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from testtraverse.config import HOOK_BUCKETS


def _flags(**flags: bool) -> Dict[str, bool]:
    return {k: True for k, v in flags.items() if v}


@dataclass(frozen=True)
class Span:
    start: int
    end: int

    def to_dict(self) -> Dict[str, int]:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class DeferredError:
    message: str
    location: int

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "location": self.location}


@dataclass(frozen=True)
class ArgumentDescriptor:
    kind: str
    start: int
    end: int

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "start": self.start, "end": self.end}


@dataclass(frozen=True)
class CallSite:
    name: str
    start: int  # start of this chain segment
    end: int
    root_start: int  # start of the whole call; != start for chained calls
    is_awaited: bool
    arguments: Tuple[ArgumentDescriptor, ...]
    literal_arguments: Optional[Dict[int, Any]] = None
    api_sync_disabled: bool = False
    api_wait_after: bool = False
    errors: Tuple[DeferredError, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "name": self.name,
            "start": self.start,
            "end": self.end,
            "rootStart": self.root_start,
            "isAwaited": self.is_awaited,
            "arguments": [a.to_dict() for a in self.arguments],
        }
        if self.literal_arguments:
            out["literalArguments"] = dict(self.literal_arguments)
        out.update(_flags(apiSyncDisabled=self.api_sync_disabled, apiWaitAfter=self.api_wait_after))
        if self.errors:
            out["errors"] = [e.to_dict() for e in self.errors]
        return out


@dataclass(frozen=True)
class ScopeFrame:
    kind: str  # test, test.only, test.skip, group, group.only, group.skip
    label: str
    callee: str
    start: int
    end: int
    skip: bool = False
    only: bool = False
    ios_only: bool = False
    android_only: bool = False

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "kind": self.kind,
            "label": self.label,
            "callee": self.callee,
            "start": self.start,
            "end": self.end,
        }
        out.update(_flags(skip=self.skip, only=self.only, iosOnly=self.ios_only, androidOnly=self.android_only))
        return out


@dataclass(frozen=True)
class TestCase:
    __test__ = False

    scope: Tuple[ScopeFrame, ...]
    start: int
    end: int
    function_start: int
    function_end: int
    is_async: bool
    calls: Tuple[CallSite, ...]
    try_blocks: Tuple[Span, ...] = ()
    skip: bool = False
    only: bool = False
    ios_only: bool = False
    android_only: bool = False

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "scope": [f.to_dict() for f in self.scope],
            "start": self.start,
            "end": self.end,
            "functionBodyStart": self.function_start,
            "functionBodyEnd": self.function_end,
            "isAsync": self.is_async,
            "calls": [c.to_dict() for c in self.calls],
            "tryBlocks": [s.to_dict() for s in self.try_blocks],
        }
        out.update(_flags(skip=self.skip, only=self.only, iosOnly=self.ios_only, androidOnly=self.android_only))
        return out


@dataclass(frozen=True)
class HookCase(TestCase):
    hook: str = ""

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out["hook"] = self.hook
        return out


@dataclass(frozen=True)
class ExportedFunction:
    name: str
    start: int  # full declaration
    end: int
    export_start: int  # statement where the export happens; may equal start
    export_end: int
    function_start: int  # function implementation body
    function_end: int
    is_async: bool
    calls: Tuple[CallSite, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "start": self.start,
            "end": self.end,
            "exportStart": self.export_start,
            "exportEnd": self.export_end,
            "functionBodyStart": self.function_start,
            "functionBodyEnd": self.function_end,
            "isAsync": self.is_async,
            "calls": [c.to_dict() for c in self.calls],
        }


@dataclass(frozen=True)
class FileIndex:
    functions: Tuple[ExportedFunction, ...] = ()
    tests: Tuple[TestCase, ...] = ()
    # keyed by hook name as written in source (beforeAll, ...)
    hooks: Dict[str, Tuple[HookCase, ...]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "functions": [f.to_dict() for f in self.functions],
            "tests": [t.to_dict() for t in self.tests],
            "hooks": {
                bucket: [h.to_dict() for h in self.hooks.get(hook, ())]
                for hook, bucket in HOOK_BUCKETS.items()
            },
        }
