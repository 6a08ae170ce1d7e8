import logging
import sys


def setup_logging(log_level: str = "WARNING") -> None:
    """
    Configure process-wide logging for the testtraverse CLI.
    Library modules only ever call logging.getLogger(__name__).
    """

    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


logger = logging.getLogger("testtraverse")
