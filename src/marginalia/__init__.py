"""Marginalia - provenance-tagged research notes and scored source highlights.

Two text-annotation engines: a block markup language for freeform notes
(``marginalia.markup``) and a highlight segmenter that partitions a source
document against relevance-scored spans (``marginalia.highlights``).
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

__version__ = "0.1.0"


def setup_logging(log_dir: Path | None = None) -> Path:
    """Configure logging to both console and rotating file.

    Args:
        log_dir: Directory for the log file. Defaults to
            ``Settings.app.log_dir``.

    Returns:
        Path of the log file that was configured.
    """
    if log_dir is None:
        from marginalia.config import get_settings

        log_dir = get_settings().app.log_dir

    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"marginalia.{os.getpid()}.log"

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # File handler - detailed logging with rotation (10MB, keep 5 backups)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(file_formatter)

    # Console handler - less verbose
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_formatter = logging.Formatter("%(levelname)s: %(message)s")
    console_handler.setFormatter(console_formatter)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.debug("Logging configured. Log file: %s", log_file.absolute())
    return log_file


def main() -> None:
    """Entry point for the ``marginalia`` console script."""
    from marginalia.cli import main as cli_main

    cli_main()
