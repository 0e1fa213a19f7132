import logging
import os

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

_custom = Theme({"info": "cyan", "warn": "yellow", "err": "bold red", "ok": "green"})
_console = Console(theme=_custom)

LOGGER_NAME = "nodepower"


def info(msg: str):
    _console.print(f"[info]{msg}[/info]")


def warn(msg: str):
    _console.print(f"[warn]{msg}[/warn]")


def ok(msg: str):
    _console.print(f"[ok]{msg}[/ok]")


def get_logger(name: str | None = None) -> logging.Logger:
    if not name:
        return logging.getLogger(LOGGER_NAME)
    if name == LOGGER_NAME or name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def setup_logging(log_dir: str | None = None, log_level: int = logging.INFO) -> logging.Logger:
    """
    Setup logging for the package.

    Args:
        log_dir: Directory for a plain-text log file (console only if None)
        log_level: Logging level

    Returns:
        Configured package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    # Calling twice must not duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(console=_console, show_path=False, rich_tracebacks=True)
    console_handler.setFormatter(logging.Formatter("%(name)s - %(message)s"))
    logger.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(os.path.join(log_dir, "nodepower.log"))
        file_handler.setFormatter(
            logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        )
        logger.addHandler(file_handler)

    return logger
