"""
Data model for video generation jobs.

A job is stored as two records sharing one id: the JobRecord holds the request
and its result, the StatusRecord holds the frequently updated progress fields.
Both carry the same status value.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


PROMPT_MIN_LENGTH = 10
PROMPT_MAX_LENGTH = 500
VALID_DURATIONS = (5, 10)

DEFAULT_RESOLUTION = "1080p"
DEFAULT_FORMAT = "mp4"

MESSAGE_QUEUED = "Video generation queued"
MESSAGE_STARTED = "Video generation started"
MESSAGE_PROCESSING = "Generating video... This may take a few minutes"
MESSAGE_COMPLETED = "Video generation completed successfully"
MESSAGE_FAILED = "Video generation failed"
MESSAGE_TIMED_OUT = "Video generation timed out"


class VideoModel(str, Enum):
    """Selectable video generation providers."""
    LUMA = "luma"
    GEMINI = "gemini"
    HEYGEN = "heygen"
    DEMO = "demo"


class GenerationStatus(str, Enum):
    """Lifecycle status of a job."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (GenerationStatus.COMPLETED, GenerationStatus.FAILED)

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]

    def can_transition_to(self, new_status: "GenerationStatus") -> bool:
        """Forward-only movement; terminal states accept nothing."""
        if self.is_terminal:
            return False
        return new_status.rank >= self.rank


_STATUS_RANK = {
    GenerationStatus.PENDING: 0,
    GenerationStatus.PROCESSING: 1,
    GenerationStatus.COMPLETED: 2,
    GenerationStatus.FAILED: 2,
}


class ProviderState(str, Enum):
    """Normalized provider-side job state."""
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class NormalizedStatus:
    """A provider status report mapped onto the common vocabulary."""
    state: ProviderState
    asset_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    failure_reason: Optional[str] = None
    description: Optional[str] = None
    raw_state: Optional[str] = None

    @property
    def has_asset(self) -> bool:
        return self.state == ProviderState.COMPLETED and bool(self.asset_url)


@dataclass
class ProviderJobHandle:
    """What a provider hands back from submit."""
    provider: str
    external_id: Optional[str] = None
    # Set by providers that finish synchronously
    result: Optional[NormalizedStatus] = None

    @property
    def is_complete(self) -> bool:
        return self.result is not None and self.result.has_asset


@dataclass
class VideoMetadata:
    """Descriptive metadata for a finished video."""
    resolution: Optional[str] = None
    format: Optional[str] = None
    file_size: Optional[str] = None
    description: Optional[str] = None


@dataclass
class JobRecord:
    """One user-initiated generation request and its result."""
    id: str
    prompt: str
    duration: int
    model: str
    status: GenerationStatus = GenerationStatus.PENDING
    provider: Optional[str] = None
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    metadata: Optional[VideoMetadata] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class StatusRecord:
    """Progress view of a job, updated on every poll cycle."""
    id: str
    status: GenerationStatus = GenerationStatus.PENDING
    progress: int = 0
    message: str = MESSAGE_QUEUED
    error: Optional[str] = None
