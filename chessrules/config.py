"""Runtime settings loaded from ``CHESSRULES_*`` environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings

from .engine.types import Variant


class Settings(BaseSettings):
    """Settings for the HTTP service and CLI."""

    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    max_perft_depth: int = 5
    default_variant: str = "chess"

    @property
    def variant(self) -> Variant:
        return Variant.from_name(self.default_variant)

    model_config = {"env_prefix": "CHESSRULES_", "env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache()
def get_settings() -> Settings:
    return Settings()
