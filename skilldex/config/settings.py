"""
Global settings from environment variables.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SkilldexSettings(BaseSettings):
    """
    Global configuration loaded from environment variables.

    Environment variables are prefixed with SKILLDEX_
    Example: SKILLDEX_CHARS_PER_TOKEN=4, SKILLDEX_SCAN_TIMEOUT_SECONDS=10
    """

    model_config = SettingsConfigDict(
        env_prefix="SKILLDEX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core settings
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Corpus scanning
    corpus_dirs: list[str] = Field(
        default_factory=lambda: ["plugins", "~/.skilldex/corpus"],
        description="Corpus directories to scan",
    )
    scan_timeout_seconds: float | None = Field(default=30.0, gt=0)
    scan_concurrency: int = Field(default=16, ge=1)

    # Cost estimation
    summary_line_tokens: int = Field(default=12, ge=1)
    chars_per_token: int = Field(default=4, ge=1)
    extended_file_default_tokens: int = Field(default=800, ge=0)
    low_cost_max_tokens: int = Field(default=1500, ge=0)
    medium_cost_max_tokens: int = Field(default=5000, ge=0)

    # Trigger matching
    fuzzy_threshold: float = Field(default=0.0, ge=0.0, le=1.0)  # 0.0 = disabled
    fuzzy_weight: float = Field(default=0.5, gt=0.0, lt=1.0)

    # Disclosure
    include_enhances: bool = False


# Global settings instance (singleton)
settings = SkilldexSettings()


__all__ = ["SkilldexSettings", "settings"]
