"""
Video Generation Service

Turns a text prompt into a video by delegating to an external provider:
- Luma Dream Machine (asynchronous, polled)
- HeyGen avatar videos (asynchronous, polled)
- Gemini concept + stock clip (synchronous)
- Demo placeholder clips (synchronous, no credential)

Jobs live in an in-memory JobStore; the GenerationOrchestrator polls
in-flight provider jobs until they reach a terminal state.
"""

from .errors import (
    VideoGenerationError,
    InvalidGenerationRequest,
    UnknownProviderError,
    ProviderAuthError,
    ProviderRequestError,
    PollError,
    GenerationTimeoutError,
    InvalidStatusTransition,
)
from .job_store import JobStore
from .models import (
    GenerationStatus,
    JobRecord,
    NormalizedStatus,
    ProviderJobHandle,
    ProviderState,
    StatusRecord,
    VideoMetadata,
    VideoModel,
)
from .orchestrator import GenerationOrchestrator
from .providers import ProviderRegistry, VideoProvider, build_registry
from .scheduler import AsyncioScheduler, PollTask, Scheduler

__all__ = [
    "VideoGenerationError",
    "InvalidGenerationRequest",
    "UnknownProviderError",
    "ProviderAuthError",
    "ProviderRequestError",
    "PollError",
    "GenerationTimeoutError",
    "InvalidStatusTransition",
    "JobStore",
    "GenerationStatus",
    "JobRecord",
    "NormalizedStatus",
    "ProviderJobHandle",
    "ProviderState",
    "StatusRecord",
    "VideoMetadata",
    "VideoModel",
    "GenerationOrchestrator",
    "ProviderRegistry",
    "VideoProvider",
    "build_registry",
    "AsyncioScheduler",
    "PollTask",
    "Scheduler",
]
