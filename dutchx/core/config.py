"""
Engine configuration parameters for dutchx.

Defines settlement rules and operational settings. Values can be
overridden from the environment (or a .env file) with DUTCHX_* variables.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from dotenv import dotenv_values

from dutchx.crypto import bytes_to_hex, hex_to_bytes
from dutchx.utils.logger import SUBSYSTEMS

ENV_PREFIX = "DUTCHX_"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class EngineConfig:
    """Engine-wide configuration parameters"""

    # Settlement
    fee_percent: int = 5  # Platform fee, percent of the amount paid
    proceeds_recipient: bytes = field(default_factory=lambda: bytes(20))

    # Ledger behaviour
    legacy_reject_duplicate_credit: bool = False  # Reject credits to unwithdrawn balances

    # Listing hardening
    validate_on_list: bool = True  # Reject empty/inverted windows and negative prices

    # Logging
    log_level: int = logging.INFO
    log_dir: Path = Path("logs")
    log_to_file: bool = False
    log_levels: Dict[str, int] = field(default_factory=dict)  # Per-subsystem overrides

    def __post_init__(self):
        if not 0 <= self.fee_percent <= 100:
            raise ValueError(f"fee_percent must be in [0, 100], got {self.fee_percent}")
        if len(self.proceeds_recipient) != 20:
            raise ValueError(
                f"proceeds_recipient must be 20 bytes, got {len(self.proceeds_recipient)}"
            )

    def as_dict(self) -> dict:
        """Printable view of the configuration."""
        return {
            "fee_percent": self.fee_percent,
            "proceeds_recipient": bytes_to_hex(self.proceeds_recipient),
            "legacy_reject_duplicate_credit": self.legacy_reject_duplicate_credit,
            "validate_on_list": self.validate_on_list,
            "log_level": logging.getLevelName(self.log_level),
            "log_dir": str(self.log_dir),
            "log_to_file": self.log_to_file,
            "log_levels": {
                name: logging.getLevelName(level) for name, level in self.log_levels.items()
            },
        }


def _read_env(env_path: Optional[str]) -> Dict[str, str]:
    """
    Collect DUTCHX_* settings from a .env file and the process environment.

    Process environment variables take precedence over the file. The
    process environment itself is not modified.
    """
    values: Dict[str, Optional[str]] = {}
    if env_path:
        values.update(dotenv_values(env_path))
    values.update(os.environ)
    return {
        key[len(ENV_PREFIX):]: value
        for key, value in values.items()
        if key.startswith(ENV_PREFIX) and value is not None
    }


def _as_bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _parse_level(name: str) -> int:
    level = logging.getLevelName(name.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name}")
    return level


def _parse_levels(value: str) -> Dict[str, int]:
    """Parse 'ledger=DEBUG,registry=WARNING' into subsystem levels."""
    levels: Dict[str, int] = {}
    for item in filter(None, (part.strip() for part in value.split(","))):
        name, sep, level = item.partition("=")
        name = name.strip().lower()
        if not sep or not name:
            raise ValueError(f"Expected subsystem=LEVEL, got: {item}")
        if name not in SUBSYSTEMS:
            raise ValueError(f"Unknown log subsystem: {name}")
        levels[name] = _parse_level(level)
    return levels


def load_config(env_path: Optional[str] = None) -> EngineConfig:
    """
    Load configuration from the environment.

    Args:
        env_path: Optional path to a .env file. Variables already set in
            the process environment take precedence over the file.

    Returns:
        EngineConfig instance
    """
    env = _read_env(env_path)
    defaults = EngineConfig()

    fee = env.get("FEE_PERCENT")
    recipient = env.get("PROCEEDS_RECIPIENT")
    level = env.get("LOG_LEVEL")
    log_dir = env.get("LOG_DIR")
    levels = env.get("LOG_LEVELS")

    return EngineConfig(
        fee_percent=int(fee) if fee else defaults.fee_percent,
        proceeds_recipient=hex_to_bytes(recipient) if recipient else defaults.proceeds_recipient,
        legacy_reject_duplicate_credit=_as_bool(
            env.get("LEGACY_REJECT_DUPLICATE_CREDIT"), defaults.legacy_reject_duplicate_credit
        ),
        validate_on_list=_as_bool(env.get("VALIDATE_ON_LIST"), defaults.validate_on_list),
        log_level=_parse_level(level) if level else defaults.log_level,
        log_dir=Path(log_dir) if log_dir else defaults.log_dir,
        log_to_file=_as_bool(env.get("LOG_TO_FILE"), defaults.log_to_file),
        log_levels=_parse_levels(levels) if levels else {},
    )
