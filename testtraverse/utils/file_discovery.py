from pathlib import Path
from typing import Iterable, List

import pathspec

from testtraverse.config import IGNORED_DIRS


def _gitignore_spec(root_dir: Path) -> pathspec.PathSpec:
    gitignore_pth = root_dir / ".gitignore"
    gitign_pattern = gitignore_pth.read_text().splitlines() if gitignore_pth.exists() else []
    return pathspec.PathSpec.from_lines("gitwildmatch", gitign_pattern)


def discover_files(roots: Iterable[str], suffixes: Iterable[str]) -> List[str]:
    """
    Source files under each root whose suffix is in `suffixes`, minus what the
    root's .gitignore excludes. A root that is a file is taken as-is.
    """
    suffixes = set(suffixes)
    found = set()
    for root in roots:
        root_dir = Path(root)
        if root_dir.is_file():
            found.add(str(root_dir))
            continue
        spec = _gitignore_spec(root_dir)
        for file_path in root_dir.rglob("*"):
            rel = file_path.relative_to(root_dir)
            if any(part in IGNORED_DIRS for part in rel.parts):
                continue
            if file_path.suffix not in suffixes or not file_path.is_file():
                continue
            if spec.match_file(rel.as_posix()):
                continue
            found.add(str(file_path))
    return sorted(found)
