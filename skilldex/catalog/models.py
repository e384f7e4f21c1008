"""
Catalog data models.

Defines the core data structures shared by the catalog and disclosure layers:
DocumentKind, ContextCost, Tier, ExtensionRef, Document, ScanFailure, ScanReport.
"""

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class DocumentKind(str, Enum):
    """Kind of marketplace document."""

    SKILL = "skill"
    AGENT = "agent"
    COMMAND = "command"


class ContextCost(str, Enum):
    """Declared context-window weight of a document."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _COST_RANK[self]


_COST_RANK = {ContextCost.LOW: 0, ContextCost.MEDIUM: 1, ContextCost.HIGH: 2}


class Tier(int, Enum):
    """Progressive disclosure tier."""

    SUMMARY = 1
    BODY = 2
    EXTENDED = 3


def make_document_id(kind: DocumentKind, name: str) -> str:
    """Build the stable document id for a (kind, name) pair."""
    return f"{kind.value}:{name}"


class ExtensionRef(BaseModel):
    """
    A Tier-3 file referenced from a document body.

    Only the reference is recorded; the file content is read on demand.
    """

    model_config = ConfigDict(frozen=True)

    name: str  # File stem, e.g. "templates"
    path: str  # Resolved relative to the document directory
    see_also: bool = False  # Referenced from a "see ..." line
    size_bytes: int | None = None  # Filled in by the scanner via stat()

    @property
    def filename(self) -> str:
        return self.path.rsplit("/", 1)[-1]


class Document(BaseModel):
    """
    A skill, agent or command definition.

    Documents are immutable once parsed; the Registry owns them.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    kind: DocumentKind
    name: str
    description: str
    summary: tuple[str, ...] = ()
    context_cost: ContextCost = ContextCost.MEDIUM
    load_when: tuple[str, ...] = ()
    requires: tuple[str, ...] = ()
    enhances: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    body: str = ""
    extended_files: tuple[ExtensionRef, ...] = ()
    path: str | None = None
    metadata: Mapping[str, Any] = Field(
        default_factory=dict, validate_default=True
    )  # Unknown frontmatter keys, read-only

    @field_validator("metadata", mode="after")
    @classmethod
    def _freeze_metadata(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(value))

    @field_serializer("metadata")
    def _serialize_metadata(self, value: Mapping[str, Any]) -> dict[str, Any]:
        return dict(value)

    def summary_lines(self) -> tuple[str, ...]:
        """Tier-1 lines; the description stands in for an empty summary."""
        return self.summary or (self.description,)


class ScanFailure(BaseModel):
    """A document that could not be registered."""

    path: str
    error_type: str
    reason: str


class ScanReport(BaseModel):
    """Result of a corpus scan: parsed documents plus per-file failures."""

    documents: list[Document] = Field(default_factory=list)
    failures: list[ScanFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures
