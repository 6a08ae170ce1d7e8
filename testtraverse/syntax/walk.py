from typing import Iterator, List, Optional, Tuple

from testtraverse.syntax.nodes import Node

Ancestors = Tuple[Node, ...]


def _walk(root: Node, kind: Optional[type]) -> Iterator[Tuple[Node, Ancestors]]:
    # `path` is the chain from root to the node being visited; a snapshot is
    # taken only for nodes that are reported
    stack = [(root, False)]
    path: List[Node] = []
    while stack:
        node, expanded = stack.pop()
        if expanded:
            path.pop()
            if kind is None or isinstance(node, kind):
                yield node, tuple(path)
            continue
        stack.append((node, True))
        path.append(node)
        for child in reversed(node.children()):
            stack.append((child, False))


def walk_with_ancestors(root: Node) -> Iterator[Tuple[Node, Ancestors]]:
    """
    Post-order walk over `root` and everything below it.

    Yields (node, ancestors) where ancestors runs from `root` down to the
    node's parent. Children are reported before their parents, so for a
    chain like `a().b()` the inner `a()` call comes first.
    """
    return _walk(root, None)


def iter_nodes(root: Node, kind: type) -> Iterator[Tuple[Node, Ancestors]]:
    return _walk(root, kind)
