"""
Global dependency instances for the console server.

Initialized during app lifespan, accessed by routers.
"""

from skilldex.manager import CatalogManager

from server.config import ConsoleConfig

_catalog_manager: CatalogManager | None = None
_console_config: ConsoleConfig | None = None


def set_console_config(config: ConsoleConfig) -> None:
    global _console_config
    _console_config = config


def get_console_config() -> ConsoleConfig:
    if _console_config is None:
        raise RuntimeError("ConsoleConfig not initialized")
    return _console_config


def set_catalog_manager(manager: CatalogManager) -> None:
    global _catalog_manager
    _catalog_manager = manager


def get_catalog_manager() -> CatalogManager:
    if _catalog_manager is None:
        raise RuntimeError("CatalogManager not initialized")
    return _catalog_manager
