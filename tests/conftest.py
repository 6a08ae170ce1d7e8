import pytest
from tree_sitter_language_pack import get_parser

from testtraverse.syntax import nodes as js
from testtraverse.syntax.treesitter_builder import parse_javascript
from testtraverse.syntax.walk import iter_nodes


@pytest.fixture(scope="session")
def js_parser():
    return get_parser("javascript")


@pytest.fixture
def parse(js_parser):
    def _parse(source):
        return parse_javascript(source, js_parser)
    return _parse


@pytest.fixture
def outermost_call(parse):
    """The call expression spanning the most source text."""
    def _outermost(source):
        calls = [node for node, _ in iter_nodes(parse(source), js.CallExpression)]
        return min(calls, key=lambda c: (c.start, -c.end))
    return _outermost
