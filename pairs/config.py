"""Application configuration from the environment."""

import os
from dataclasses import dataclass
from functools import lru_cache

from .engine_core.action import DEFAULT_REVEAL_DELAY_MS


@dataclass(frozen=True)
class Config:
    reveal_delay_ms: int = DEFAULT_REVEAL_DELAY_MS
    host: str = "127.0.0.1"
    port: int = 8000
    allowed_origins: tuple[str, ...] = ("*",)
    static_dir: str | None = None
    log_level: str = "INFO"


@lru_cache
def get_config() -> Config:
    return Config(
        reveal_delay_ms=int(os.environ.get("PAIRS_REVEAL_DELAY_MS", DEFAULT_REVEAL_DELAY_MS)),
        host=os.environ.get("PAIRS_HOST", "127.0.0.1"),
        port=int(os.environ.get("PAIRS_PORT", "8000")),
        allowed_origins=tuple(os.environ.get("ALLOWED_ORIGINS", "*").split(",")),
        static_dir=os.environ.get("PAIRS_STATIC_DIR") or None,
        log_level=os.environ.get("PAIRS_LOG_LEVEL", "INFO").upper(),
    )
