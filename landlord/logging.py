"""Logging setup for the ledger server and scripts."""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Union

if TYPE_CHECKING:
    from .settings import LedgerSettings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"


def log_file_name(name: str, when: Optional[datetime] = None) -> str:
    """``<name>-<UTC timestamp>.log``; ``name`` is usually the ledger file stem."""
    when = when or datetime.now(tz=timezone.utc)
    return f"{name}-{when.strftime(LOG_FILE_TIMESTAMP_FORMAT)}.log"


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_dir: Optional[Union[Path, str]] = None,
    *,
    name: str = "ledger",
) -> Optional[Path]:
    """Send every record to stdout and, with ``log_dir``, to a per-run file.

    Handlers from an earlier call are closed and replaced. Returns the log
    file path, or ``None`` when only stdout is used.
    """
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    log_path: Optional[Path] = None
    if log_dir is not None:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        log_path = directory / log_file_name(name)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    return log_path


def configure_logging(settings: "LedgerSettings", *, name: Optional[str] = None) -> Optional[Path]:
    """Apply the configured level and directory, naming the file after the ledger."""
    return setup_logging(
        settings.log_level,
        settings.log_dir,
        name=name or Path(settings.data_file).stem,
    )
