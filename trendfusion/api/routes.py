"""FastAPI routes for fused trend reports."""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from trendfusion.api.schemas import ErrorResponse, FusedReportRequest, FusedReportResponse, HealthResponse
from trendfusion.orchestrator import FusionOrchestrator, InvalidRequestError

logger = logging.getLogger(__name__)

router = APIRouter()

TOTAL_FAILURE_MESSAGE = "Failed to fetch insights from OpenAI, Perplexity, or Gemini"


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report unparseable request bodies with the same 400 shape as other bad input."""
    errors = exc.errors()
    if not errors:
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})
    first = errors[0]
    field = (first.get("loc") or ("body",))[-1]
    logger.info("Rejected request to %s: %s %s", request.url.path, field, first.get("msg"))
    return JSONResponse(status_code=400, content={"error": f"Invalid {field}: {first.get('msg', 'bad value')}"})


def get_orchestrator(request: Request) -> FusionOrchestrator:
    return request.app.state.orchestrator


@router.get("/health", response_model=HealthResponse)
async def health(orchestrator: FusionOrchestrator = Depends(get_orchestrator)) -> HealthResponse:
    """Report the configured panel and referee."""
    return HealthResponse(
        status="healthy",
        providers=orchestrator.provider_names,
        referee=orchestrator.referee,
    )


@router.post(
    "/generate-fused",
    response_model=FusedReportResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate_fused(
    body: FusedReportRequest,
    orchestrator: FusionOrchestrator = Depends(get_orchestrator),
):
    """Generate, cross-validate and fuse a trend report for one topic.

    Individual provider failures come back as placeholder text listed under
    ``unavailable``; only invalid input or an unexpected pipeline error fails
    the whole request.
    """
    try:
        result = await orchestrator.run(body.topic, body.detail_level)
    except InvalidRequestError as exc:
        return JSONResponse(status_code=400, content={"error": str(exc)})
    except Exception:
        logger.exception("Fusion pipeline failed for topic %r", body.topic)
        return JSONResponse(status_code=500, content={"error": TOTAL_FAILURE_MESSAGE})

    return FusedReportResponse.from_composite(result)
