import os
from dataclasses import dataclass
from typing import List, Optional, Tuple

from testtraverse.syntax.source import read_source


@dataclass(frozen=True)
class LineInfo:
    size: int  # total chars in file
    lines: List[str]  # split on "\n", terminators dropped

    @property
    def line_lengths(self) -> List[int]:
        # chars per line, trailing "\n" included
        return [len(line) + 1 for line in self.lines]


def file_line_info(file_path: str) -> LineInfo:
    content = read_source(file_path)
    return LineInfo(size=len(content), lines=content.split("\n"))


class FileLineCache:
    """
    Remembers the line layout of the most recently used file only. Lookups
    usually come grouped by file, so one entry balances speed and memory.
    Create one per run and pass it to whatever needs locations.
    """

    def __init__(self):
        self._file_path: Optional[str] = None
        self._info: Optional[LineInfo] = None

    def line_info(self, file_path: str) -> LineInfo:
        if file_path != self._file_path or self._info is None:
            self._info = file_line_info(file_path)
            self._file_path = file_path
        return self._info

    def map_offset(self, file_path: str, offset: int) -> Tuple[int, int]:
        """
        Character offset -> (line, column), both starting from 1.
        The offset just past the last character is allowed.
        """
        info = self.line_info(file_path)
        if offset < 0 or offset > info.size:
            raise ValueError(f"offset {offset} outside of {file_path} ({info.size} chars)")
        # line lengths sum to size + 1, so some line always contains offset
        running = 0
        for index, length in enumerate(info.line_lengths):
            if running + length > offset:
                return index + 1, offset - running + 1
            running += length
        raise ValueError(f"offset {offset} outside of {file_path}")

    def line_text(self, file_path: str, line: int) -> str:
        return self.line_info(file_path).lines[line - 1]

    def format_location(self, file_path: str, offset: int) -> str:
        line, col = self.map_offset(file_path, offset)
        return f"{os.path.abspath(file_path)}:{line}:{col}"
