import argparse
import json
import sys
import traceback
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from tqdm import tqdm

from testtraverse import config
from testtraverse.errors import ParseLimitationsError, SourceSyntaxError, TestTraverseError
from testtraverse.registry.extractor_registry import get_extractor
from testtraverse.utils.file_discovery import discover_files
from testtraverse.utils.line_mapping import FileLineCache
from testtraverse.utils.log import logger, setup_logging


@dataclass(frozen=True)
class FileFailure:
    file_path: str
    error: TestTraverseError


def _process_single_file_worker(args):
    file_path, language = args
    extractor_instance = get_extractor(language)
    try:
        extractor_instance.process_file(file_path)
    except TestTraverseError as e:
        return file_path, None, e
    return file_path, extractor_instance.extract_all_records(), None


def create_index(
    file_paths: Sequence[str],
    language: str = config.DEFAULT_LANGUAGE,
    workers: int = 1,
    keep_going: bool = False,
    progress: bool = False,
) -> Tuple[Dict[str, Any], List[FileFailure]]:
    """
    Index every file, keyed by path, in the order given.

    Stops at the first file that cannot be extracted unless `keep_going` is
    set, in which case failing files are skipped. Failures are returned, not
    raised.
    """
    results: Dict[str, Any] = {}
    failures: List[FileFailure] = []
    tasks_args = [(file_path, language) for file_path in file_paths]

    executor = ThreadPoolExecutor(max_workers=workers) if workers > 1 else None
    try:
        outcomes = executor.map(_process_single_file_worker, tasks_args) if executor \
            else map(_process_single_file_worker, tasks_args)
        for file_path, records, error in tqdm(outcomes, total=len(tasks_args), desc="Indexing", disable=not progress):
            if error is not None:
                failures.append(FileFailure(file_path, error))
                logger.warning("Unable to process - %s: %s", file_path, error)
                if not keep_going:
                    break
                continue
            results[file_path] = records
    finally:
        if executor is not None:
            executor.shutdown(wait=True, cancel_futures=True)
    return results, failures


def format_failure(failure: FileFailure, cache: FileLineCache) -> str:
    error = failure.error
    if isinstance(error, SourceSyntaxError):
        line, col = cache.map_offset(failure.file_path, error.offset)
        arrow = " " * (col - 1) + "^"
        return (
            f"Syntax Error : {error.message}\n\n"
            f"{cache.line_text(failure.file_path, line)}\n{arrow}\n\n"
            f"at ({cache.format_location(failure.file_path, error.offset)})"
        )
    if isinstance(error, ParseLimitationsError):
        return f"{error.message}\n\nat ({cache.format_location(failure.file_path, error.at_char)})"
    return f"{failure.file_path}: {error}"


def write_output(results: Dict[str, Any], output: Optional[str]) -> None:
    if output:
        with open(output, "w", encoding="utf-8") as f:
            json.dump(results, f, indent=2, ensure_ascii=False)
    else:
        json.dump(results, sys.stdout, indent=2, ensure_ascii=False)
        sys.stdout.write("\n")


def run_index(args) -> int:
    suffixes = args.ext or config.EXT_MAP[config.DEFAULT_LANGUAGE]
    file_paths = discover_files(args.roots, suffixes)
    logger.info("Found %d source files", len(file_paths))

    results, failures = create_index(
        file_paths,
        workers=args.workers,
        keep_going=args.keep_going,
        progress=not args.no_progress and len(file_paths) > 1,
    )

    cache = FileLineCache()
    for failure in failures:
        print(format_failure(failure, cache), file=sys.stderr)
    if failures and not args.keep_going:
        return 1

    write_output(results, args.output)
    return 1 if failures else 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Index tests, hooks and exported functions of JavaScript sources")
    subparsers = parser.add_subparsers(dest="function", help="Available functions")

    parser_index = subparsers.add_parser("index", help="Extract records from source files")
    parser_index.add_argument("roots", nargs="+", help="Files or directories to scan")
    parser_index.add_argument("--output", "-o", default=None,
                              help="Write JSON to this file instead of stdout")
    parser_index.add_argument("--ext", action="append", default=None,
                              help="File suffix to include, repeatable (default: .js .mjs .cjs .jsx)")
    parser_index.add_argument("--workers", type=int, default=config.default_workers(),
                              help="Number of worker threads (default: $TESTTRAVERSE_WORKERS or 1)")
    parser_index.add_argument("--keep_going", "--keep-going", dest="keep_going", action="store_true",
                              help="Skip files that cannot be extracted instead of aborting")
    parser_index.add_argument("--no_progress", "--no-progress", dest="no_progress", action="store_true",
                              help="Do not show a progress bar")
    parser_index.add_argument("--log_level", "--log-level", dest="log_level", default=config.LOG_LEVEL,
                              help="Logging level (default: $TESTTRAVERSE_LOG_LEVEL or WARNING)")

    args = parser.parse_args(argv)

    if not args.function:
        parser.print_help()
        return 0

    setup_logging(args.log_level)
    try:
        if args.function == "index":
            return run_index(args)
    except Exception as e:
        logger.debug(traceback.format_exc())
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
