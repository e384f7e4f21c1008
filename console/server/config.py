"""
Console server configuration.

Loaded from environment variables with SKILLDEX_CONSOLE_ prefix.
"""

from pydantic_settings import BaseSettings


class ConsoleConfig(BaseSettings):
    model_config = {"env_prefix": "SKILLDEX_CONSOLE_"}

    # Server
    host: str = "0.0.0.0"
    port: int = 8422

    # Corpus; empty means the directories from SkilldexSettings
    corpus_dirs: list[str] = []

    # Default context budget when a request does not send one
    default_budget_tokens: int = 8000

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:3001"]
