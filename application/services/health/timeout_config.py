from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(slots=True)
class ProbeTimeoutConfig:
    """Probe timeout bounds with env overrides."""
    default_timeout_ms: int = 3000
    min_timeout_ms: int = 100
    max_timeout_ms: int = 30000
    close_timeout_ms: int = 250

    @classmethod
    def from_env(cls) -> "ProbeTimeoutConfig":
        """Build ProbeTimeoutConfig from environment variables."""
        def _int(name: str, default: int) -> int:
            try:
                return int(os.getenv(name, str(default)))
            except ValueError:
                return default

        return cls(
            default_timeout_ms=_int("HEALTH_DEFAULT_TIMEOUT_MS", 3000),
            min_timeout_ms=_int("HEALTH_MIN_TIMEOUT_MS", 100),
            max_timeout_ms=_int("HEALTH_MAX_TIMEOUT_MS", 30000),
            close_timeout_ms=_int("HEALTH_CLOSE_TIMEOUT_MS", 250),
        )

    def accepts(self, timeout_ms: int) -> bool:
        return self.min_timeout_ms <= timeout_ms <= self.max_timeout_ms
