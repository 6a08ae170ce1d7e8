import json
import logging
import os
from typing import Any, Dict, Optional

from tree_sitter_language_pack import get_parser

from testtraverse.base.record_extractor import RecordExtractor
from testtraverse.extractors.exported_functions import find_exported_functions
from testtraverse.extractors.tests_and_hooks import find_tests
from testtraverse.models.records import FileIndex
from testtraverse.syntax.nodes import Program
from testtraverse.syntax.source import parse_source, read_source

log = logging.getLogger(__name__)


def index_program(program: Optional[Program]) -> FileIndex:
    """Run both extractors over one file's tree."""
    functions = find_exported_functions(program)
    tests, hooks = find_tests(program)
    return FileIndex(functions=functions, tests=tests, hooks=hooks)


class JavascriptTestExtractor(RecordExtractor):
    """
    Extracts tests, lifecycle hooks and exported functions, together with the
    calls each of them makes, from JavaScript module sources (Tree-sitter,
    JavaScript grammar).
    """

    def __init__(self):
        self.parser = get_parser("javascript")
        self.file_path: Optional[str] = None
        self.index = FileIndex()

    # ------------- Public API -------------

    def index_source(self, source: str) -> FileIndex:
        return index_program(parse_source(source, self.parser))

    def process_file(self, file_path: str) -> FileIndex:
        """
        Raises ParseLimitationsError or SourceSyntaxError; the caller decides
        whether that stops a batch.
        """
        self.file_path = file_path
        self.index = FileIndex()
        self.index = self.index_source(read_source(file_path))
        log.info("%s: %d functions, %d tests", file_path, len(self.index.functions), len(self.index.tests))
        return self.index

    def extract_all_records(self) -> Dict[str, Any]:
        return self.index.to_dict()

    def write_to_file(self, output_path: str):
        directory = os.path.dirname(output_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump({self.file_path: self.extract_all_records()}, f, indent=2, ensure_ascii=False)
