"""RFP search endpoint: proxy to TED EUROPA with normalized results."""
import json
import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.api.schemas.rfp import FilterOptions, SearchErrorResponse, SearchResponse
from app.connectors.ted.exceptions import TEDUpstreamError
from app.services.rfp_search_service import search_rfp_notices

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rfp", tags=["rfp"])

UPSTREAM_ERROR = "Failed to fetch data from TED EUROPA"
INVALID_REQUEST_ERROR = "Invalid request data"
INTERNAL_ERROR = "Internal server error"
# Status when TED could not be reached at all (no upstream status to mirror)
UPSTREAM_UNREACHABLE_STATUS = 502


def _error_response(status_code: int, error: str, details: Any) -> JSONResponse:
    body = SearchErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def _validation_details(exc: ValidationError) -> list[dict[str, Any]]:
    return json.loads(exc.json(include_url=False))


async def _parse_filters(request: Request) -> FilterOptions:
    """Empty body means default filters; anything else must be a FilterOptions object."""
    raw = await request.body()
    if not raw.strip():
        return FilterOptions()
    return FilterOptions.model_validate_json(raw)


@router.post(
    "/search",
    response_model=SearchResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": SearchErrorResponse},
        500: {"model": SearchErrorResponse},
        502: {"model": SearchErrorResponse},
    },
    summary="Search TED EUROPA for document/record management RFPs",
)
async def search_rfp(request: Request) -> Any:
    """
    Search TED notices with the caller's FilterOptions (date range, category, search term, SME only).
    On TED failure the upstream status is mirrored with {error, details, notices: [], total: 0}.
    """
    try:
        filters = await _parse_filters(request)
    except ValidationError as e:
        logger.info("Invalid RFP search request: %s", e.errors(include_url=False))
        return _error_response(400, INVALID_REQUEST_ERROR, _validation_details(e))

    try:
        result = await run_in_threadpool(search_rfp_notices, filters)
    except TEDUpstreamError as e:
        status = e.status_code or UPSTREAM_UNREACHABLE_STATUS
        return _error_response(status, UPSTREAM_ERROR, e.body)
    except ValidationError as e:
        # Normalized data violated the SearchResponse contract: our bug, not the caller's
        logger.error("RFP search output contract violation: %s", e.errors(include_url=False))
        return _error_response(400, INVALID_REQUEST_ERROR, _validation_details(e))
    except Exception as e:
        logger.exception("Error in /api/rfp/search")
        return _error_response(500, INTERNAL_ERROR, str(e) or type(e).__name__)

    return JSONResponse(content=result.model_dump(mode="json", by_alias=True, exclude_none=True))
