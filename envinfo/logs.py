from __future__ import annotations

import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """Send log records to stdout as ``ts level logger: msg`` lines.

    Only the first call installs a handler; later calls just adjust the level.
    """
    log_level = level.upper()
    root = logging.getLogger()
    root.setLevel(log_level)
    if getattr(root, "_envinfo_configured", False):
        return

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    ch = logging.StreamHandler(sys.stdout)
    ch.setFormatter(fmt)
    root.addHandler(ch)

    root._envinfo_configured = True  # type: ignore[attr-defined]
    logging.getLogger(__name__).debug("Logging initialized at %s", log_level)
