"""Engine configuration read from the environment."""

from __future__ import annotations

import os
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field


class EngineConfig(BaseModel):
    """Process-wide engine settings."""
    bridge_enabled: bool = Field(True, description="Probe and use the schema bridge for foreign schemas")
    cache_validators: bool = Field(True, description="Reuse compiled validators per schema identity")
    max_issues: int = Field(100, ge=1, description="Cap on issues collected by validate_value()")

    model_config = ConfigDict(frozen=True, extra="forbid")


_TRUE = {"1", "true", "yes", "on", "auto"}
_FALSE = {"0", "false", "no", "off"}


def _flag_from_env(var_name: str, default: bool) -> bool:
    raw = os.getenv(var_name)
    if not raw:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    return default


def _int_from_env(var_name: str, default: int) -> int:
    raw = os.getenv(var_name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= 1 else default


def load_config() -> EngineConfig:
    """Build an EngineConfig from SCHEMALOOM_* environment variables."""
    return EngineConfig(
        bridge_enabled=_flag_from_env("SCHEMALOOM_BRIDGE", True),
        cache_validators=_flag_from_env("SCHEMALOOM_CACHE_VALIDATORS", True),
        max_issues=_int_from_env("SCHEMALOOM_MAX_ISSUES", 100),
    )


@lru_cache(maxsize=1)
def get_config() -> EngineConfig:
    """Return the memoized configuration (call get_config.cache_clear() to reload)."""
    return load_config()
