"""
Request/response models for the HTTP API.

Field names are snake_case in Python and camelCase on the wire.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from services.video_generation.models import (
    PROMPT_MAX_LENGTH,
    PROMPT_MIN_LENGTH,
    JobRecord,
    StatusRecord,
    VideoModel,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateVideoRequest(BaseModel):
    """Request to generate a video."""
    prompt: str = Field(..., min_length=PROMPT_MIN_LENGTH, max_length=PROMPT_MAX_LENGTH)
    duration: Literal["5", "10"] = "5"
    model: VideoModel = VideoModel.DEMO


class VideoMetadataResponse(CamelModel):
    resolution: Optional[str] = None
    file_size: Optional[str] = None
    format: Optional[str] = None
    description: Optional[str] = None


class VideoResponse(CamelModel):
    """Full job record."""
    id: str
    status: str
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    prompt: str
    duration: int
    model: str
    provider: Optional[str] = None
    created_at: str
    metadata: Optional[VideoMetadataResponse] = None

    @classmethod
    def from_record(cls, job: JobRecord) -> "VideoResponse":
        metadata = None
        if job.metadata is not None:
            metadata = VideoMetadataResponse(
                resolution=job.metadata.resolution,
                file_size=job.metadata.file_size,
                format=job.metadata.format,
                description=job.metadata.description,
            )
        return cls(
            id=job.id,
            status=job.status.value,
            video_url=job.video_url,
            thumbnail_url=job.thumbnail_url,
            prompt=job.prompt,
            duration=job.duration,
            model=job.model,
            provider=job.provider,
            created_at=job.created_at.isoformat(),
            metadata=metadata,
        )


class VideoStatusResponse(CamelModel):
    """Lightweight progress view of a job."""
    id: str
    status: str
    progress: int = Field(..., ge=0, le=100)
    message: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_record(cls, status: StatusRecord) -> "VideoStatusResponse":
        return cls(
            id=status.id,
            status=status.status.value,
            progress=status.progress,
            message=status.message,
            error=status.error,
        )


class HealthResponse(CamelModel):
    status: str = "ok"
    api_connected: bool
    models: dict[str, bool]


class ErrorResponse(BaseModel):
    error: str
    message: str
    details: Optional[Any] = None
