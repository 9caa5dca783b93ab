"""
Gateway configuration.

Values are fixed once the Gateway is built. from_env() reads them at process
start; malformed environment values fall back to the defaults.
"""

import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class GatewayConfig(BaseModel):
    """Admission, cache and backend settings."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    rate_limit_window: float = Field(10.0, gt=0, description="Admission window in seconds")
    max_requests: int = Field(5, ge=1, description="Requests admitted per window")
    cache_capacity: int = Field(100, ge=1, description="Dialog cache entries")
    max_prompt_length: int = Field(3000, ge=1)
    backend_timeout: float = Field(30.0, gt=0, description="Seconds before a backend call is abandoned")
    sweep_threshold: int = Field(10_000, ge=1, description="Tracked identities before stale windows are swept")

    model_name: str = "gemini-2.0-flash"
    api_key: Optional[str] = None
    api_url: str = GEMINI_BASE_URL

    @classmethod
    def from_env(cls) -> "GatewayConfig":
        return cls(
            rate_limit_window=_env_float("WARP_RATE_LIMIT_WINDOW", 10.0),
            max_requests=_env_int("WARP_MAX_REQUESTS", 5),
            cache_capacity=_env_int("WARP_CACHE_CAPACITY", 100),
            max_prompt_length=_env_int("WARP_MAX_PROMPT_LENGTH", 3000),
            backend_timeout=_env_float("WARP_BACKEND_TIMEOUT", 30.0),
            sweep_threshold=_env_int("WARP_SWEEP_THRESHOLD", 10_000),
            model_name=os.getenv("WARP_MODEL", "gemini-2.0-flash"),
            api_key=os.getenv("GEMINI_API_KEY") or None,
            api_url=os.getenv("WARP_API_URL", GEMINI_BASE_URL),
        )
