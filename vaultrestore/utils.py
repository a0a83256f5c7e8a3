"""
Utility functions for vaultrestore.

Includes logging setup and human-readable sizes.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


# Global console for pretty output
console = Console()


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "pretty",
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Set up logging for a run.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: "pretty" (rich console) or "structured" (JSON lines)
        log_file: Optional file to log to as well (always structured)

    Returns:
        Configured "vaultrestore" logger
    """
    logger = logging.getLogger("vaultrestore")
    logger.setLevel(getattr(logging, log_level.upper()))
    logger.handlers = []  # Clear existing handlers

    if log_format == "pretty":
        console_handler: logging.Handler = RichHandler(
            console=Console(stderr=True), rich_tracebacks=True, show_path=False
        )
    else:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(StructuredFormatter())
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    return logger


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Identifiers passed via extra={...}
        for key in ("archive_id", "job_id", "path"):
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def format_bytes(size: int) -> str:
    """
    Convert a byte count to a human-readable string.

    Examples:
        >>> format_bytes(512)
        '512 B'
        >>> format_bytes(1536)
        '1.50 KiB'
    """
    units = ["B", "KiB", "MiB", "GiB", "TiB", "PiB"]
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(units) - 1:
        value /= 1024
        unit += 1
    if unit == 0:
        return f"{int(value)} B"
    return f"{value:.2f} {units[unit]}"
