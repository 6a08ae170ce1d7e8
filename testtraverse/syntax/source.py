import logging
from typing import Optional

import chardet
from tree_sitter import Parser

from testtraverse.syntax.nodes import Program
from testtraverse.syntax.treesitter_builder import parse_javascript

log = logging.getLogger(__name__)


def read_source(file_path: str) -> str:
    """
    Read a source file as text. UTF-8 is expected; anything else is decoded
    with the encoding chardet guesses for it.
    """
    with open(file_path, "rb") as f:
        raw = f.read()
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        guess = chardet.detect(raw)
        encoding = guess.get("encoding") or "utf-8"
        log.info("%s is not UTF-8, decoding as %s", file_path, encoding)
        return raw.decode(encoding, errors="replace")


def is_script(source: str) -> bool:
    # node scripts starting with a shebang line are not test/module sources
    return source.startswith("#!")


def parse_source(source: str, parser: Optional[Parser] = None) -> Optional[Program]:
    """Returns None for sources that should produce no records."""
    if is_script(source):
        return None
    return parse_javascript(source, parser)
