"""Unified logging facade for pcaviz."""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Union

ROOT_LOGGER_NAME = "pcaviz"


class LoggingManager:
    """Logging manager that wraps a standard library logger."""

    def __init__(
        self,
        name: str = ROOT_LOGGER_NAME,
        level: int = logging.INFO,
        log_file: Optional[Union[str, Path]] = None,
    ):
        """Initialize logging manager.

        Args:
            name: Logger name
            level: Logging level
            log_file: Optional log file path
        """
        self.name = name
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

        # Child loggers propagate to the root pcaviz logger, which owns the handlers
        if name.startswith(ROOT_LOGGER_NAME + "."):
            get_logger(ROOT_LOGGER_NAME)
        elif not self.logger.handlers:
            self._setup_console_handler()

            if log_file:
                self._setup_file_handler(log_file)

    def _setup_console_handler(self) -> None:
        """Set up console logging handler."""
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)

        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        console_handler.setFormatter(formatter)

        self.logger.addHandler(console_handler)

    def _setup_file_handler(self, log_file: Union[str, Path]) -> None:
        """Set up file logging handler.

        Args:
            log_file: Path to log file
        """
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(logging.DEBUG)

        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
        )
        file_handler.setFormatter(formatter)

        self.logger.addHandler(file_handler)

    def set_level(self, level: int) -> None:
        self.logger.setLevel(level)
        for handler in self.logger.handlers:
            if isinstance(handler, logging.FileHandler):
                continue
            handler.setLevel(level)

    def debug(self, message: str, *args: Any) -> None:
        self.logger.debug(message, *args)

    def info(self, message: str, *args: Any) -> None:
        self.logger.info(message, *args)

    def warning(self, message: str, *args: Any) -> None:
        self.logger.warning(message, *args)

    def error(self, message: str, *args: Any) -> None:
        self.logger.error(message, *args)

    def exception(self, message: str, *args: Any) -> None:
        """Log exception message with traceback."""
        self.logger.exception(message, *args)

    def log_metrics(self, metrics: Dict[str, Any], step: Optional[int] = None) -> None:
        """Log a flat dictionary of metrics on one line.

        Args:
            metrics: Dictionary of metrics to log
            step: Optional step number
        """
        metrics_str = ", ".join([f"{k}: {v}" for k, v in metrics.items()])
        step_str = f" (step {step})" if step is not None else ""
        self.logger.info(f"Metrics{step_str}: {metrics_str}")


# Global logging manager instances cache
_logger_cache: Dict[str, LoggingManager] = {}


def get_logger(name: str = ROOT_LOGGER_NAME, **kwargs: Any) -> LoggingManager:
    """Get or create logging manager for the given name.

    Args:
        name: Logger name
        **kwargs: Additional arguments for LoggingManager (only used on first call for each name)

    Returns:
        LoggingManager instance
    """
    if name not in _logger_cache:
        _logger_cache[name] = LoggingManager(name, **kwargs)

    return _logger_cache[name]


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
) -> LoggingManager:
    """Apply ``level`` to every pcaviz logger and optionally add a log file.

    Args:
        level: Logging level
        log_file: Optional log file path, attached to the root ``pcaviz`` logger

    Returns:
        The root LoggingManager instance
    """
    root = get_logger(ROOT_LOGGER_NAME)
    if log_file and not any(
        isinstance(handler, logging.FileHandler) for handler in root.logger.handlers
    ):
        root._setup_file_handler(log_file)
    for manager in _logger_cache.values():
        manager.set_level(level)
    return root
