"""
Document catalog - Parsing, scanning and the immutable Registry.

Marketplace documents (skills, agents, commands) are parsed from Markdown
with YAML frontmatter and collected into a Registry that validates names,
references and the requires graph before it becomes available.
"""

from skilldex.catalog.exceptions import (
    CatalogError,
    CatalogNotReadyError,
    CyclicRequiresError,
    DanglingReferenceError,
    DependencyCycleError,
    DocumentNotFoundError,
    DocumentParseError,
    DuplicateNameError,
    MalformedMetadataError,
    MissingFieldError,
    RegistryValidationError,
    ResolutionError,
    ScanTimeoutError,
    SummaryTooComplexError,
)
from skilldex.catalog.models import (
    ContextCost,
    Document,
    DocumentKind,
    ExtensionRef,
    ScanFailure,
    ScanReport,
    Tier,
)
from skilldex.catalog.parser import DocumentParser, parse_document
from skilldex.catalog.registry import Registry
from skilldex.catalog.scanner import CorpusScanner

__all__ = [
    "CatalogError",
    "CatalogNotReadyError",
    "CyclicRequiresError",
    "DanglingReferenceError",
    "DependencyCycleError",
    "DocumentNotFoundError",
    "DocumentParseError",
    "DuplicateNameError",
    "MalformedMetadataError",
    "MissingFieldError",
    "RegistryValidationError",
    "ResolutionError",
    "ScanTimeoutError",
    "SummaryTooComplexError",
    "ContextCost",
    "Document",
    "DocumentKind",
    "ExtensionRef",
    "ScanFailure",
    "ScanReport",
    "Tier",
    "DocumentParser",
    "parse_document",
    "Registry",
    "CorpusScanner",
]
