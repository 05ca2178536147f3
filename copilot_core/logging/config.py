# =============================================================================
# copilot_core/logging/config.py
# Logging Configuration for Startup Copilot
# =============================================================================

import logging
import os
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, Union


LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Overridable so Streamlit Cloud can point logs at a writable mount
LOG_DIR = Path(os.environ.get("COPILOT_LOG_DIR", "logs"))

# Client libraries that log every request at INFO
NOISY_LOGGERS = (
    "urllib3",
    "httpx",
    "httpcore",
    "hpack",
    "supabase",
    "postgrest",
    "gotrue",
    "google.auth",
)


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_to_file: bool = True,
    log_filename: Optional[str] = None,
) -> None:
    """
    Configure root logging for the app process.

    Args:
        level: Level as an int or a name such as "DEBUG"
        log_to_file: Also write to LOG_DIR/<log_filename>
        log_filename: Defaults to copilot_YYYY-MM-DD.log
    """
    outputs = [logging.StreamHandler(sys.stdout)]

    if log_to_file:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        filename = log_filename or f"copilot_{datetime.now():%Y-%m-%d}.log"
        outputs.append(logging.FileHandler(LOG_DIR / filename, encoding="utf-8"))

    # force=True: Streamlit reruns the script and would otherwise stack handlers
    logging.basicConfig(
        level=_resolve_level(level),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=outputs,
        force=True,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("copilot_core").debug(
        f"Logging configured (level={logging.getLevelName(_resolve_level(level))}, file={log_to_file})"
    )


def get_logger(name: str) -> logging.Logger:
    """
    Usage:
        logger = get_logger(__name__)
        logger.info("Fetching projects")
    """
    return logging.getLogger(name)


class LogContext:
    """
    Times a block and logs its outcome.

    Usage:
        with LogContext(logger, "Creating project 'EcoTech'"):
            store.create("projects", record)
        # -> "Creating project 'EcoTech' done in 0.04s"
    """

    def __init__(self, logger: logging.Logger, operation: str):
        self.logger = logger
        self.operation = operation
        self.elapsed: Optional[float] = None
        self._started: Optional[float] = None

    def __enter__(self):
        self._started = time.perf_counter()
        self.logger.debug(f"{self.operation} started")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed = time.perf_counter() - self._started

        if exc_type is None:
            self.logger.info(f"{self.operation} done in {self.elapsed:.2f}s")
        else:
            self.logger.warning(f"{self.operation} failed after {self.elapsed:.2f}s: {exc_val}")

        return False
