"""
Centralized logging configuration for dutchx.

Every subsystem logs under `dutchx.<subsystem>`. Console output is
coloured with colorlog and written to stderr, so command output on stdout
(prices, JSON config) stays machine-readable. A plain-text log file is
optional.

One level applies to the whole tree; individual subsystems can be turned
up or down on top of it, e.g. DUTCHX_LOG_LEVELS="ledger=DEBUG,registry=WARNING".
"""

import logging
import sys
from pathlib import Path
from typing import Dict, Optional

import colorlog

ROOT_LOGGER = "dutchx"
SUBSYSTEMS = ("pricing", "escrow", "auction", "ledger", "registry", "cli")
LOG_FILE = "dutchx.log"

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


def _console_handler() -> logging.Handler:
    handler = colorlog.StreamHandler(sys.stderr)
    handler.setFormatter(colorlog.ColoredFormatter(
        "%(log_color)s%(asctime)s [%(name)s] %(levelname)-8s%(reset)s %(message)s",
        datefmt=DATE_FORMAT,
        log_colors=LOG_COLORS,
    ))
    return handler


def _file_handler(log_dir: Path) -> logging.Handler:
    log_dir.mkdir(exist_ok=True, parents=True)
    handler = logging.FileHandler(log_dir / LOG_FILE)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(name)s] %(levelname)-8s %(message)s",
        datefmt=DATE_FORMAT,
    ))
    return handler


class DutchxLogger:
    """Owns the handlers of the `dutchx` logger tree"""

    _initialized = False
    _log_dir: Optional[Path] = None
    _overrides: Dict[str, int] = {}

    @classmethod
    def setup(
        cls,
        level: int = logging.INFO,
        log_dir: Optional[str] = None,
        log_to_file: bool = False,
        levels: Optional[Dict[str, int]] = None,
        force: bool = False,
    ):
        """
        Setup logging configuration.

        Args:
            level: Level for the whole `dutchx` tree
            log_dir: Directory for the log file. If None, uses ./logs
            log_to_file: Also write plain-text logs to `<log_dir>/dutchx.log`
            levels: Per-subsystem levels, e.g. {"ledger": logging.DEBUG}
            force: Reconfigure even if already initialized

        Raises:
            ValueError: unknown subsystem in `levels`
        """
        if cls._initialized and not force:
            return

        root_logger = logging.getLogger(ROOT_LOGGER)
        root_logger.setLevel(level)
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()

        # Handlers carry no level; filtering happens on the loggers
        root_logger.addHandler(_console_handler())

        cls._log_dir = None
        if log_to_file:
            cls._log_dir = Path(log_dir) if log_dir else Path("logs")
            root_logger.addHandler(_file_handler(cls._log_dir))

        cls._apply_overrides(levels or {})
        cls._initialized = True

    @classmethod
    def _apply_overrides(cls, levels: Dict[str, int]) -> None:
        unknown = sorted(set(levels) - set(SUBSYSTEMS))
        if unknown:
            raise ValueError(f"Unknown log subsystem(s): {', '.join(unknown)}")

        for name in cls._overrides:
            logging.getLogger(f"{ROOT_LOGGER}.{name}").setLevel(logging.NOTSET)
        for name, level in levels.items():
            logging.getLogger(f"{ROOT_LOGGER}.{name}").setLevel(level)
        cls._overrides = dict(levels)

    @classmethod
    def log_file(cls) -> Optional[Path]:
        """Path of the active log file, if file logging is on."""
        return cls._log_dir / LOG_FILE if cls._log_dir else None

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """
        Get a logger for a specific subsystem.

        Args:
            name: Subsystem name (e.g., 'escrow', 'ledger', 'registry')

        Returns:
            Logger instance
        """
        if not cls._initialized:
            cls.setup()

        return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific subsystem"""
    return DutchxLogger.get_logger(name)


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[str] = None,
    log_to_file: bool = False,
    levels: Optional[Dict[str, int]] = None,
):
    """Setup (or reconfigure) logging"""
    DutchxLogger.setup(
        level=level, log_dir=log_dir, log_to_file=log_to_file, levels=levels, force=True
    )


def configure_logging(config) -> None:
    """Apply the logging fields of an EngineConfig."""
    setup_logging(
        level=config.log_level,
        log_dir=str(config.log_dir),
        log_to_file=config.log_to_file,
        levels=config.log_levels,
    )
