"""
Runtime settings, read from the environment.

A ``.env`` file in the working directory is loaded first so local overrides
do not need a manual ``export``:

    PORTGRAPH_CACHE_DELAY=10      # host ticks between connection cache refreshes
    PORTGRAPH_LOG_LEVEL=INFO
    PORTGRAPH_HOST=0.0.0.0
    PORTGRAPH_PORT=3001
"""
from __future__ import annotations

import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class Settings(BaseModel):
    cache_delay: int = Field(default=10, ge=1)
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3001

    @classmethod
    def from_env(cls) -> "Settings":
        values = {}
        for field_name in cls.model_fields:
            raw = os.environ.get(f"PORTGRAPH_{field_name.upper()}")
            if raw is not None:
                values[field_name] = raw
        return cls(**values)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_dotenv()
    return Settings.from_env()
