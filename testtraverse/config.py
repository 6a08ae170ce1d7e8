import os

# file suffixes picked up when walking a directory
EXT_MAP = {
    "javascript": [".js", ".mjs", ".cjs", ".jsx"],
}

DEFAULT_LANGUAGE = "javascript"

# directories never descended into, whatever .gitignore says
IGNORED_DIRS = {"node_modules", ".git"}

# hook name as written in source -> bucket name in the output
HOOK_BUCKETS = {
    "beforeAll": "before",
    "beforeEach": "beforeEach",
    "afterAll": "after",
    "afterEach": "afterEach",
}

SUPPORTED_HOOKS = frozenset(HOOK_BUCKETS)

LOG_LEVEL = os.environ.get("TESTTRAVERSE_LOG_LEVEL", "WARNING")


def default_workers() -> int:
    raw = os.environ.get("TESTTRAVERSE_WORKERS", "1")
    try:
        return max(1, int(raw))
    except ValueError:
        return 1
