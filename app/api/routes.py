"""API routes for Investor Research."""

import logging
from functools import lru_cache
from typing import Any, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.errors import PipelineError
from app.pipeline import InvestorResearchPipeline, build_pipeline
from app.store import InvestorStore

logger = logging.getLogger(__name__)

router = APIRouter()


class ResearchRequest(BaseModel):
    """Request body for researching one identifier."""
    input: Optional[Any] = None
    skipExisting: Optional[bool] = None


@lru_cache
def get_store() -> InvestorStore:
    return InvestorStore()


@lru_cache
def get_pipeline() -> InvestorResearchPipeline:
    return build_pipeline(get_store())


@router.post("/investor-research")
async def investor_research(
    request: ResearchRequest,
    pipeline: InvestorResearchPipeline = Depends(get_pipeline),
):
    """Classify an identifier and, for investors, run deep research."""
    logger.info(f"investor-research received: input={request.input!r} skipExisting={request.skipExisting}")
    try:
        outcome = await pipeline.run(request.input, skip_existing=request.skipExisting)
    except PipelineError as e:
        logger.warning(f"Investor research failed ({e.status_code}): {e.message}")
        return JSONResponse(e.to_response(), status_code=e.status_code)
    except Exception as e:
        logger.exception("Investor research error")
        return JSONResponse(
            {"error": "Investor research failed", "details": str(e)},
            status_code=500,
        )
    return outcome.to_response()


@router.get("/investors/{investor_id}")
async def get_investor(investor_id: str, store: InvestorStore = Depends(get_store)):
    """Return a stored investor record."""
    record = store.get(investor_id)
    if record is None:
        return JSONResponse({"error": "Investor not found"}, status_code=404)
    return record


@router.get("/investors/{investor_id}/deep-research")
async def get_deep_research(investor_id: str, store: InvestorStore = Depends(get_store)):
    """Return the stored deep research text for an investor."""
    record = store.get(investor_id)
    if record is None:
        return JSONResponse({"error": "Investor not found"}, status_code=404)
    return {"investor_id": investor_id, "deep_research": record.get("deep_research")}
