"""
skilldex - Skill registry and progressive-disclosure loader

Usage:
    from skilldex import CatalogManager

    manager = CatalogManager(corpus_dirs=[Path("plugins")])
    await manager.initialize()

    plan = manager.load("write tests with mocking python", budget_tokens=4000)
    blocks = await manager.render(plan)
"""

from skilldex.catalog.exceptions import CatalogError, DocumentNotFoundError
from skilldex.catalog.models import ContextCost, Document, DocumentKind, Tier
from skilldex.catalog.parser import DocumentParser
from skilldex.catalog.registry import Registry
from skilldex.disclosure.loader import DisclosureLoader, LoadPlan, PlanEntry
from skilldex.manager import CatalogManager, ContentBlock

__all__ = [
    "CatalogError",
    "CatalogManager",
    "ContentBlock",
    "ContextCost",
    "DisclosureLoader",
    "Document",
    "DocumentKind",
    "DocumentNotFoundError",
    "DocumentParser",
    "LoadPlan",
    "PlanEntry",
    "Registry",
    "Tier",
]
