"""
Runtime settings read from the environment.

Every variable is optional and prefixed with SCHEDSIM_; an unset, empty or
unparsable value falls back to the default. Command-line flags take
precedence over anything set here.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_PREFIX = "SCHEDSIM_"


def _parse_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_int(value: Optional[str], default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _parse_str(value: Optional[str], default: str) -> str:
    return value.strip() if value else default


@dataclass(frozen=True)
class Settings:
    default_algorithm: str = "fcfs"
    default_quantum: int = 2
    max_jobs: int = 20
    log_level: str = "WARNING"
    debug: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        defaults = cls()

        def get(name: str) -> Optional[str]:
            return env.get(ENV_PREFIX + name)

        return cls(
            default_algorithm=_parse_str(get("DEFAULT_ALGORITHM"), defaults.default_algorithm).lower(),
            default_quantum=_parse_int(get("DEFAULT_QUANTUM"), defaults.default_quantum),
            max_jobs=_parse_int(get("MAX_JOBS"), defaults.max_jobs),
            log_level=_parse_str(get("LOG_LEVEL"), defaults.log_level).upper(),
            debug=_parse_bool(get("DEBUG"), defaults.debug),
        )

    @property
    def effective_log_level(self) -> int:
        if self.debug:
            return logging.DEBUG
        level = logging.getLevelName(self.log_level)
        return level if isinstance(level, int) else logging.WARNING
