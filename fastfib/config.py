"""Centralized fastfib configuration.

Override via environment variables or a .env file at the repository root.

=== SETTINGS ===

1. Engine (FASTFIB_*)
   - FASTFIB_STRATEGY: "iterative" (default) or "recursive"
   - FASTFIB_MEMOIZE: Enable the per-engine pair cache (default: true)
   - FASTFIB_LARGE_INDEX_WARNING: Index above which a LargeIndexWarning is
     emitted (default: 100000, 0 disables)

2. Observability (FASTFIB_METRICS_*)
   - FASTFIB_METRICS_ENABLED: Record Prometheus metrics (default: true)
"""

import os
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
from pathlib import Path

from dotenv import load_dotenv

from fastfib.errors import ConfigurationError

logger = logging.getLogger(__name__)

env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def _get_env(key: str, default: str) -> str:
    """Get environment variable with default."""
    return os.getenv(key, default)


def _get_env_int(key: str, default: int) -> int:
    """Get integer environment variable with default."""
    raw = os.getenv(key, str(default))
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from e


def _get_env_bool(key: str, default: bool) -> bool:
    """Get boolean environment variable with default."""
    val = os.getenv(key, str(default)).lower()
    return val in ("true", "1", "yes", "on")


class Strategy(str, Enum):
    """Fast-doubling formulations."""

    ITERATIVE = "iterative"  # MSB-first loop over the bits of n
    RECURSIVE = "recursive"  # halving recursion, depth O(log n)

    @classmethod
    def parse(cls, value) -> "Strategy":
        """Resolve a Strategy from an enum member or its name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            valid = ", ".join(s.value for s in cls)
            raise ConfigurationError(
                f"Unknown strategy {value!r}, expected one of: {valid}"
            ) from e


# ============================================================================
# ENGINE
# ============================================================================

@dataclass
class EngineConfig:
    """Fast-doubling engine defaults.

    Environment Variables:
        FASTFIB_STRATEGY: "iterative" or "recursive" (default: iterative)
        FASTFIB_MEMOIZE: Cache every visited pair (default: true)
        FASTFIB_LARGE_INDEX_WARNING: Warning threshold (default: 100000)
    """

    strategy: Strategy = field(
        default_factory=lambda: Strategy.parse(_get_env("FASTFIB_STRATEGY", "iterative"))
    )
    memoize: bool = field(default_factory=lambda: _get_env_bool("FASTFIB_MEMOIZE", True))

    # Matches ~20899 decimal digits
    large_index_warning: int = field(
        default_factory=lambda: _get_env_int("FASTFIB_LARGE_INDEX_WARNING", 100000)
    )

    def __post_init__(self):
        if self.large_index_warning < 0:
            raise ConfigurationError(
                f"large_index_warning must be >= 0, got {self.large_index_warning}"
            )


# ============================================================================
# OBSERVABILITY
# ============================================================================

@dataclass
class MetricsConfig:
    """Prometheus metrics settings.

    Environment Variables:
        FASTFIB_METRICS_ENABLED: Record metrics (default: true)
    """

    enabled: bool = field(default_factory=lambda: _get_env_bool("FASTFIB_METRICS_ENABLED", True))


@dataclass
class FastFibConfig:
    """Master fastfib configuration."""

    engine: EngineConfig = field(default_factory=EngineConfig)
    metrics: MetricsConfig = field(default_factory=MetricsConfig)


# Global singleton
_config: Optional[FastFibConfig] = None


def get_config() -> FastFibConfig:
    """Get the global fastfib configuration singleton."""
    global _config
    if _config is None:
        _config = FastFibConfig()
        logger.debug(
            f"Loaded config: strategy={_config.engine.strategy.value}, "
            f"memoize={_config.engine.memoize}, metrics={_config.metrics.enabled}"
        )
    return _config


def reset_config() -> None:
    """Reset configuration (for testing)."""
    global _config
    _config = None


# Convenience accessors
def get_engine_config() -> EngineConfig:
    """Get engine configuration."""
    return get_config().engine


def get_metrics_config() -> MetricsConfig:
    """Get metrics configuration."""
    return get_config().metrics
