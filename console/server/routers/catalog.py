"""
Catalog maintenance API router.
"""

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import PlainTextResponse

from skilldex.catalog.exceptions import RegistryValidationError, ScanTimeoutError
from skilldex.catalog.models import DocumentKind

from server.dependencies import get_catalog_manager
from server.schemas import RefreshResponse, ScanFailureResponse

router = APIRouter(prefix="/api/catalog", tags=["catalog"])


@router.post("/refresh", response_model=RefreshResponse)
async def refresh_catalog() -> RefreshResponse:
    """Re-scan the corpus and swap in the rebuilt Registry."""
    manager = get_catalog_manager()
    try:
        report = await manager.refresh()
    except RegistryValidationError as e:
        raise HTTPException(
            status_code=422,
            detail={"error": type(e).__name__, "message": str(e), "document_ids": e.document_ids},
        ) from e
    except ScanTimeoutError as e:
        raise HTTPException(status_code=504, detail=str(e)) from e

    return RefreshResponse(
        document_count=len(manager.registry),
        failures=[
            ScanFailureResponse(path=f.path, error_type=f.error_type, reason=f.reason)
            for f in report.failures
        ],
    )


@router.get("/index", response_class=PlainTextResponse)
async def catalog_index(kind: DocumentKind | None = Query(default=None)) -> PlainTextResponse:
    """Generated Markdown index of the catalog."""
    text = get_catalog_manager().render_index(kind)
    return PlainTextResponse(text, media_type="text/markdown")
