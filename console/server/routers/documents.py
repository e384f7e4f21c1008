"""
Documents lookup API router.
"""

from fastapi import APIRouter, HTTPException, Query

from skilldex.catalog.models import Document, DocumentKind

from server.dependencies import get_catalog_manager
from server.schemas import DocumentResponse, DocumentSummary, ExtensionRefResponse

router = APIRouter(prefix="/api/documents", tags=["documents"])


def _document_to_summary(doc: Document) -> DocumentSummary:
    return DocumentSummary(
        id=doc.id,
        kind=doc.kind.value,
        name=doc.name,
        description=doc.description,
        context_cost=doc.context_cost.value,
        load_when=list(doc.load_when),
        tags=list(doc.tags),
    )


def _document_to_response(doc: Document) -> DocumentResponse:
    return DocumentResponse(
        **_document_to_summary(doc).model_dump(),
        summary=list(doc.summary),
        requires=list(doc.requires),
        enhances=list(doc.enhances),
        body=doc.body,
        extended_files=[
            ExtensionRefResponse(
                name=ref.name,
                path=ref.path,
                see_also=ref.see_also,
                size_bytes=ref.size_bytes,
            )
            for ref in doc.extended_files
        ],
        path=doc.path,
    )


@router.get("", response_model=list[DocumentSummary])
async def list_documents(
    kind: DocumentKind | None = Query(default=None),
    tag: str | None = Query(default=None),
) -> list[DocumentSummary]:
    """List documents, optionally filtered by kind and tag."""
    registry = get_catalog_manager().registry
    if tag:
        documents = list(registry.find_by_tag(tag))
        if kind:
            documents = [d for d in documents if d.kind == kind]
    elif kind:
        documents = list(registry.find_by_kind(kind))
    else:
        documents = list(registry)
    documents.sort(key=lambda d: d.id)
    return [_document_to_summary(d) for d in documents]


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(document_id: str) -> DocumentResponse:
    """Get one document by id (e.g. "command:deploy")."""
    doc = get_catalog_manager().get(document_id)
    if doc is None:
        raise HTTPException(status_code=404, detail="Document not found")
    return _document_to_response(doc)
