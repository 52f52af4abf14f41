"""sensorfeat.logs

Logging helpers shared by the pipeline stages and CLIs.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger("sensorfeat")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def setup_logging(verbose: bool = False) -> None:
    """Configure the root handler once for CLI runs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )


@contextmanager
def log_step(label: str) -> Iterator[None]:
    """Log start/end and wall time of a processing step."""
    logger.info(f"[START] {label}")
    t0 = time.perf_counter()
    try:
        yield
    finally:
        dt = time.perf_counter() - t0
        logger.info(f"[END]   {label} in {dt:.2f}s")
