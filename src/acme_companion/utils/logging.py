"""Logging utilities."""

import logging
import sys


def setup_logging(level: str = "INFO", process_tag: str = "companion"):
    """Setup logging for the startup process or the dhparam worker.

    The detached worker inherits the container's stdout, so its lines end up
    interleaved with the companion service output; the tag tells them apart.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format=f"%(asctime)s - {process_tag} - %(name)s - %(levelname)s - %(message)s",
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    # httpx logs every Docker API request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
