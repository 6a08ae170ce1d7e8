from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from testtraverse.extractors.call_sites import call_name
from testtraverse.extractors.literals import number_text
from testtraverse.models.records import ScopeFrame
from testtraverse.syntax import nodes as js

GENERIC_PLACEHOLDER = "${...}"


# ---------------------------
# Identifier families & modifier suffixes
# ---------------------------

def is_test_identifier(name: str) -> bool:
    return name == "it" or name.startswith("it.")


def is_group_identifier(name: str) -> bool:
    return name == "describe" or name.startswith("describe.")


def is_test_or_group_identifier(name: str) -> bool:
    return is_test_identifier(name) or is_group_identifier(name)


def is_skip(name: str) -> bool:
    return name.endswith(".skip")


def is_only(name: str) -> bool:
    return name.endswith(".only")


def is_ios_only(name: str) -> bool:
    return name.endswith(".iosOnly") or name.endswith(".ios")


def is_android_only(name: str) -> bool:
    return name.endswith(".androidOnly") or name.endswith(".android")


@dataclass(frozen=True)
class Modifiers:
    skip: bool = False
    only: bool = False
    ios_only: bool = False
    android_only: bool = False

    @classmethod
    def of(cls, name: str) -> "Modifiers":
        return cls(
            skip=is_skip(name),
            only=is_only(name),
            ios_only=is_ios_only(name),
            android_only=is_android_only(name),
        )

    def merge(self, other) -> "Modifiers":
        return Modifiers(
            skip=self.skip or other.skip,
            only=self.only or other.only,
            ios_only=self.ios_only or other.ios_only,
            android_only=self.android_only or other.android_only,
        )


def aggregate_modifiers(frames: Iterable[ScopeFrame], own_name: str) -> Modifiers:
    """OR of the modifiers of every enclosing frame and of the call itself."""
    result = Modifiers.of(own_name)
    for frame in frames:
        result = result.merge(frame)
    return result


# ---------------------------
# Frames
# ---------------------------

def _interleave(a: Sequence[str], b: Sequence[str]) -> List[str]:
    """[a1, a2, a3], [b1, b2] => [a1, b1, a2, b2, a3]"""
    out: List[str] = []
    for i in range(max(len(a), len(b))):
        if i < len(a):
            out.append(a[i])
        if i < len(b):
            out.append(b[i])
    return out


def infer_label(call: js.CallExpression) -> str:
    if not call.arguments:
        return "[Unparseable: MissingArgument]"
    node = call.arguments[0]
    if isinstance(node, js.Literal):
        if isinstance(node.value, str):
            return node.value
        if isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
            return number_text(node.value)
        return node.raw
    if isinstance(node, js.TemplateLiteral):
        placeholders = [
            "${%s}" % e.name if isinstance(e, js.Identifier) else GENERIC_PLACEHOLDER
            for e in node.expressions
        ]
        return "".join(_interleave(node.quasis, placeholders))
    if isinstance(node, js.Identifier):
        return "${%s}" % node.name
    return f"[Unparseable: {node.kind}]"


def frame_kind(name: str) -> str:
    kind = "test" if is_test_identifier(name) else "group"
    if is_only(name):
        return kind + ".only"
    if is_skip(name):
        return kind + ".skip"
    return kind


def make_frame(call: js.CallExpression, name: str) -> ScopeFrame:
    modifiers = Modifiers.of(name)
    return ScopeFrame(
        kind=frame_kind(name),
        label=infer_label(call),
        callee=name,
        start=call.start,
        end=call.end,
        skip=modifiers.skip,
        only=modifiers.only,
        ios_only=modifiers.ios_only,
        android_only=modifiers.android_only,
    )


def enclosing_frames(ancestors: Sequence[js.Node]) -> Tuple[ScopeFrame, ...]:
    """
    Test and group frames among `ancestors` (root-first, as produced by
    walk_with_ancestors), outermost frame first.
    """
    frames: List[ScopeFrame] = []
    for node in ancestors:
        if not isinstance(node, js.CallExpression):
            continue
        name = call_name(node)
        if name is not None and is_test_or_group_identifier(name):
            frames.append(make_frame(node, name))
    return tuple(frames)
