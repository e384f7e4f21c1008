"""
Progressive disclosure API router.

This is the integration point for a host assistant runtime: it sends the
current request text and its remaining context budget, and receives the
plan (and optionally the rendered content blocks) to inject.
"""

from fastapi import APIRouter

from skilldex.disclosure.loader import LoadPlan
from skilldex.manager import ContentBlock
from skilldex.utils.logging import query_context

from server.dependencies import get_catalog_manager, get_console_config
from server.schemas import (
    ContentBlockResponse,
    LoadRequest,
    LoadResponse,
    PlanEntryResponse,
)

router = APIRouter(prefix="/api/disclosure", tags=["disclosure"])


def _plan_to_response(
    plan: LoadPlan, blocks: list[ContentBlock] | None
) -> LoadResponse:
    return LoadResponse(
        query=plan.query,
        budget_tokens=plan.budget_tokens,
        entries=[
            PlanEntryResponse(
                document_id=e.document_id,
                tier=int(e.tier),
                estimated_tokens=e.estimated_tokens,
                score=e.score,
                matched=e.matched,
                extensions=e.extensions,
            )
            for e in plan.entries
        ],
        total_estimated_tokens=plan.total_estimated_tokens,
        over_budget=plan.over_budget,
        blocks=None
        if blocks is None
        else [
            ContentBlockResponse(
                document_id=b.document_id,
                tier=int(b.tier),
                title=b.title,
                content=b.content,
            )
            for b in blocks
        ],
    )


@router.post("/load", response_model=LoadResponse)
async def load(request: LoadRequest) -> LoadResponse:
    """Select document content for a query within a token budget."""
    manager = get_catalog_manager()
    budget = request.budget_tokens
    if budget is None:
        budget = get_console_config().default_budget_tokens

    with query_context():
        plan = manager.load(request.query, budget)
        blocks = await manager.render(plan) if request.render else None

    return _plan_to_response(plan, blocks)
