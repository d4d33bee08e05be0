"""
Video generation endpoints.

- POST /api/videos/generate   - start a job
- GET  /api/videos/{id}/status - poll job progress
- GET  /api/videos/{id}        - fetch the full job record
- GET  /api/health             - provider availability
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from services.video_generation import (
    GenerationOrchestrator,
    InvalidGenerationRequest,
    ProviderRegistry,
)

from .schemas import (
    ErrorResponse,
    GenerateVideoRequest,
    HealthResponse,
    VideoResponse,
    VideoStatusResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["videos"])

NOT_FOUND_RESPONSES = {404: {"model": ErrorResponse}}


def error_response(status_code: int, error: str, message: str, details: Any = None) -> JSONResponse:
    body = {"error": error, "message": message}
    if details is not None:
        body["details"] = jsonable_encoder(details)
    return JSONResponse(status_code=status_code, content=body)


def not_found() -> JSONResponse:
    return error_response(404, "Not Found", "Video not found")


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request body problems are reported as 400, not FastAPI's default 422."""
    logger.info(f"Rejected request to {request.url.path}: {len(exc.errors())} validation error(s)")
    return error_response(400, "Validation Error", "Invalid request data", details=exc.errors())


def get_orchestrator(request: Request) -> GenerationOrchestrator:
    return request.app.state.orchestrator


def get_registry(request: Request) -> ProviderRegistry:
    return request.app.state.registry


@router.post(
    "/videos/generate",
    response_model=VideoResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate_video(
    request: GenerateVideoRequest,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """
    Start video generation.

    Synchronous providers answer with a completed job; the others answer with
    a processing job that the client follows via the status endpoint.
    """
    try:
        job = await orchestrator.generate(
            prompt=request.prompt,
            duration=int(request.duration),
            model=request.model,
        )
    except InvalidGenerationRequest as e:
        return error_response(400, "Validation Error", str(e), details={"code": e.error_code})
    except Exception as e:
        logger.error(f"Video generation error: {e}")
        return error_response(
            500,
            "Generation Failed",
            str(e) or "Failed to start video generation",
        )

    return VideoResponse.from_record(job)


@router.get(
    "/videos/{video_id}/status",
    response_model=VideoStatusResponse,
    response_model_exclude_none=True,
    responses=NOT_FOUND_RESPONSES,
)
async def get_video_status(
    video_id: str,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """Get job progress."""
    status = await orchestrator.get_status(video_id)
    if status is None:
        return not_found()
    return VideoStatusResponse.from_record(status)


@router.get(
    "/videos/{video_id}",
    response_model=VideoResponse,
    response_model_exclude_none=True,
    responses=NOT_FOUND_RESPONSES,
)
async def get_video(
    video_id: str,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """Get the full job record."""
    job = await orchestrator.get_job(video_id)
    if job is None:
        return not_found()
    return VideoResponse.from_record(job)


@router.get("/health", response_model=HealthResponse)
async def health(registry: ProviderRegistry = Depends(get_registry)):
    """Health check endpoint."""
    return HealthResponse(
        status="ok",
        api_connected=registry.any_credentialed(),
        models=registry.availability(),
    )
