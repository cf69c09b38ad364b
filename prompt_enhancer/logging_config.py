"""Logging configuration for Prompt Enhancer.

Provides centralized logging setup with:
- Console output (rich formatting by default)
- File logging
- Debug mode with verbose output
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


# Default log format
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEBUG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"

# Package logger
logger = logging.getLogger("prompt_enhancer")


def parse_level(level_name: str) -> int:
    """Convert a level name such as 'INFO' to its logging constant."""
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {level_name}")
    return level


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    debug: bool = False,
    use_rich: bool = True,
) -> None:
    """Configure logging for Prompt Enhancer.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional file path for log output.
        debug: If True, enables DEBUG level and verbose format.
        use_rich: If True, uses rich console handler.
    """
    if debug:
        level = logging.DEBUG

    root_logger = logging.getLogger("prompt_enhancer")
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    log_format = DEBUG_FORMAT if debug else DEFAULT_FORMAT
    formatter = logging.Formatter(log_format)

    if use_rich:
        console_handler: logging.Handler = RichHandler(
            console=Console(stderr=True),
            level=level,
            show_time=True,
            show_path=debug,
            markup=False,
            rich_tracebacks=True,
            tracebacks_show_locals=debug,
        )
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)

    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, mode='a', encoding='utf-8')
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        root_logger.addHandler(file_handler)

        root_logger.info(f"Logging to file: {log_path}")

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    if debug:
        root_logger.debug("Debug logging enabled")


def get_default_log_file(tmp_dir: str = "./tmp") -> str:
    """Get default log file path with timestamp.

    Args:
        tmp_dir: Directory for log files.

    Returns:
        Path to log file.
    """
    Path(tmp_dir).mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return str(Path(tmp_dir) / f"prompt_enhancer_{timestamp}.log")


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module.

    Args:
        name: Module name (use __name__).

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)
