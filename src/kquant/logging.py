"""Logger shared by the kubectl client, aggregation and CLI."""

import logging
import sys

LOG = logging.getLogger("kquant")


class _DetailFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.WARNING


def setup_logging(logger: logging.Logger, verbose: bool) -> None:
    """Send warnings to stderr, and debug/info to stdout when verbose."""
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
    logger.handlers.clear()

    formatter = logging.Formatter("%(message)s")

    if verbose:
        details = logging.StreamHandler(sys.stdout)
        details.setLevel(logging.DEBUG)
        details.setFormatter(formatter)
        details.addFilter(_DetailFilter())
        logger.addHandler(details)

    problems = logging.StreamHandler(sys.stderr)
    problems.setLevel(logging.WARNING)
    problems.setFormatter(formatter)
    logger.addHandler(problems)
