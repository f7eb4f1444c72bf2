from __future__ import annotations

import logging
import sys

_PLAIN_FORMAT = "rsclint: %(message)s"
_VERBOSE_FORMAT = "rsclint [%(levelname)s] %(name)s: %(message)s"


def configure_logging(*, verbose: bool, quiet: bool) -> None:
    """
    Route rsclint logs to stderr for CLI runs.

    `verbose` turns on DEBUG with logger names, `quiet` keeps only warnings;
    stdout stays free for JSON reports.
    """

    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(
        level=level,
        format=_VERBOSE_FORMAT if verbose else _PLAIN_FORMAT,
        stream=sys.stderr,
        force=True,
    )
