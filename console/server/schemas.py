"""
API-layer Pydantic models for request/response serialization.
"""

from pydantic import BaseModel, Field


# ── Document Responses ──────────────────────────────────────────────────


class DocumentSummary(BaseModel):
    id: str
    kind: str
    name: str
    description: str
    context_cost: str
    load_when: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class ExtensionRefResponse(BaseModel):
    name: str
    path: str
    see_also: bool = False
    size_bytes: int | None = None


class DocumentResponse(DocumentSummary):
    summary: list[str] = Field(default_factory=list)
    requires: list[str] = Field(default_factory=list)
    enhances: list[str] = Field(default_factory=list)
    body: str = ""
    extended_files: list[ExtensionRefResponse] = Field(default_factory=list)
    path: str | None = None


# ── Disclosure ──────────────────────────────────────────────────────────


class LoadRequest(BaseModel):
    query: str
    budget_tokens: int | None = None
    render: bool = False


class PlanEntryResponse(BaseModel):
    document_id: str
    tier: int
    estimated_tokens: int
    score: float
    matched: bool
    extensions: list[str] = Field(default_factory=list)


class ContentBlockResponse(BaseModel):
    document_id: str
    tier: int
    title: str
    content: str


class LoadResponse(BaseModel):
    query: str
    budget_tokens: int
    entries: list[PlanEntryResponse] = Field(default_factory=list)
    total_estimated_tokens: int = 0
    over_budget: bool = False
    blocks: list[ContentBlockResponse] | None = None


# ── Catalog ─────────────────────────────────────────────────────────────


class ScanFailureResponse(BaseModel):
    path: str
    error_type: str
    reason: str


class RefreshResponse(BaseModel):
    document_count: int
    failures: list[ScanFailureResponse] = Field(default_factory=list)
