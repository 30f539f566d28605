"""
Centralized logging configuration.

Provides console and file logging with consistent formatting.
"""
import logging
import sys
from pathlib import Path
from typing import Optional


LOG_FORMAT = '%(asctime)s | %(name)s | %(levelname)s | %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'


def setup_logger(
    name: str,
    log_file: Optional[Path] = None,
    level: int = logging.INFO,
    console: bool = True
) -> logging.Logger:
    """
    Configure a logger with console and/or file output.

    Args:
        name: Logger name (typically __name__ of the calling module)
        log_file: Optional path to log file (under results/logs/)
        level: Logging level (default: INFO)
        console: Whether to also log to console (default: True)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    # Console handler
    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    # File handler
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def setup_logging(log_file: Optional[Path] = None, level: int = logging.INFO) -> None:
    """
    Setup root logger so library modules (src.*) also reach console and file.

    Args:
        log_file: Optional path to log file
        level: Logging level (default: INFO)
    """
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, mode='a', encoding='utf-8'))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        handlers=handlers,
        force=True
    )

    # Undo get_script_logger's redirection of the library logger
    lib = logging.getLogger("src")
    lib.handlers.clear()
    lib.propagate = True
    lib.setLevel(logging.NOTSET)


def get_script_logger(
    script_name: str,
    results_dir: Path,
    library_logger: Optional[str] = "src"
) -> logging.Logger:
    """
    Get a logger for a script with automatic file path under results/logs/.

    The library package logger (src.*) is pointed at the same handlers, so
    library INFO messages land in the script's console and log file.

    Args:
        script_name: Name of the script (e.g., "01_run_thread_safe_rng")
        results_dir: Path to results directory
        library_logger: Package logger to share the handlers with (None to skip)

    Returns:
        Configured logger
    """
    log_dir = results_dir / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{script_name}.log"

    logger = setup_logger(
        name=script_name,
        log_file=log_file,
        level=logging.INFO,
        console=True
    )

    if library_logger is not None:
        lib = logging.getLogger(library_logger)
        lib.setLevel(logging.INFO)
        lib.propagate = False
        lib.handlers = list(logger.handlers)

    return logger
