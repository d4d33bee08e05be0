"""
Generation Orchestrator

Bridges a stateless HTTP request to a long-running provider job:

    pending --submit--------> processing --poll...--> completed | failed
    pending --sync provider-> completed
    pending --submit error--> failed

The request returns as soon as the provider accepts the job. Poll cycles run
afterwards on the scheduler, one PollTask at a time, and write every observed
transition into the JobStore. A poll cycle never raises; failures end up as a
stored "failed" status.
"""

import asyncio
import logging
from dataclasses import replace
from enum import Enum
from typing import Optional, Union

from core.config import PollingConfig

from .errors import (
    GenerationTimeoutError,
    InvalidGenerationRequest,
    ProviderAuthError,
    ProviderRequestError,
    VideoGenerationError,
)
from .job_store import JobStore
from .models import (
    DEFAULT_FORMAT,
    DEFAULT_RESOLUTION,
    MESSAGE_COMPLETED,
    MESSAGE_FAILED,
    MESSAGE_PROCESSING,
    MESSAGE_STARTED,
    MESSAGE_TIMED_OUT,
    PROMPT_MAX_LENGTH,
    PROMPT_MIN_LENGTH,
    VALID_DURATIONS,
    GenerationStatus,
    JobRecord,
    NormalizedStatus,
    ProviderJobHandle,
    ProviderState,
    StatusRecord,
    VideoMetadata,
)
from .providers import ProviderRegistry, VideoProvider
from .scheduler import PollTask, Scheduler

logger = logging.getLogger(__name__)

SUBMITTED_PROGRESS = 10
MAX_POLL_PROGRESS = 95


class GenerationOrchestrator:
    """
    Runs the job state machine.

    Usage:
        orchestrator = GenerationOrchestrator(
            store=JobStore(),
            registry=build_registry(config),
            scheduler=AsyncioScheduler(),
            polling=config.polling,
            fallbacks=config.fallbacks,
        )

        job = await orchestrator.generate("A red fox running through snow", 5, "luma")
        status = await orchestrator.get_status(job.id)
    """

    def __init__(
        self,
        store: JobStore,
        registry: ProviderRegistry,
        scheduler: Scheduler,
        polling: Optional[PollingConfig] = None,
        fallbacks: Optional[dict[str, str]] = None,
    ):
        self.store = store
        self.registry = registry
        self.scheduler = scheduler
        self.polling = polling or PollingConfig()
        self.fallbacks = self._usable_fallbacks(fallbacks or {})

        self._active: set[str] = set()
        self._done_events: dict[str, asyncio.Event] = {}

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def _usable_fallbacks(self, fallbacks: dict[str, str]) -> dict[str, str]:
        """Keep only fallback pairs whose target is a different registered provider."""
        usable = {}
        for source, target in fallbacks.items():
            if target == source or target not in self.registry:
                logger.warning(f"Ignoring fallback {source} -> {target}: not a different registered provider")
                continue
            usable[source] = target
        return usable

    def _validate(self, prompt: str, duration: int, model: str):
        if not isinstance(prompt, str) or not (
            PROMPT_MIN_LENGTH <= len(prompt) <= PROMPT_MAX_LENGTH
        ):
            raise InvalidGenerationRequest(
                f"Prompt must be between {PROMPT_MIN_LENGTH} and "
                f"{PROMPT_MAX_LENGTH} characters"
            )
        if duration not in VALID_DURATIONS:
            raise InvalidGenerationRequest(
                f"Duration must be one of {', '.join(str(d) for d in VALID_DURATIONS)} seconds"
            )
        # Raises UnknownProviderError
        self.registry.get(model)

    async def generate(
        self,
        prompt: str,
        duration: Union[int, str] = 5,
        model: Union[str, Enum] = "demo",
    ) -> JobRecord:
        """
        Start a generation job.

        Args:
            prompt: Text description of the video
            duration: 5 or 10 seconds
            model: Provider name

        Returns:
            The job record as it stands when this request returns: completed
            for synchronous providers, processing otherwise

        Raises:
            InvalidGenerationRequest: bad input, nothing is stored
            VideoGenerationError: submission failed, the job is stored as failed
        """
        model = model.value if isinstance(model, Enum) else str(model)
        try:
            duration = int(duration)
        except (TypeError, ValueError):
            raise InvalidGenerationRequest(f"Invalid duration: {duration!r}") from None
        self._validate(prompt, duration, model)

        job = await self.store.create(prompt=prompt, duration=duration, model=model)

        try:
            provider, handle = await self._submit(job.id, model, prompt, duration)
        except Exception as e:
            error = str(e) or type(e).__name__
            logger.error(f"Generation failed for job {job.id}: {error}")
            await self.store.transition(
                job.id,
                GenerationStatus.FAILED,
                message=MESSAGE_FAILED,
                error=error,
            )
            if isinstance(e, InvalidGenerationRequest):
                # The request itself was accepted; report a generation failure
                raise VideoGenerationError(
                    error, error_code=e.error_code, provider=e.provider
                ) from e
            raise

        await self.store.update_job(job.id, provider=provider.name)

        if handle.is_complete:
            logger.info(f"Job {job.id} completed synchronously by {provider.name}")
            await self._complete(job.id, handle.result)
        else:
            # Poll cycles overwrite this with progress_for(attempt), which starts lower
            await self.store.transition(
                job.id,
                GenerationStatus.PROCESSING,
                progress=SUBMITTED_PROGRESS,
                message=MESSAGE_STARTED,
            )
            self._active.add(job.id)
            self.scheduler.schedule(
                self.polling.initial_delay,
                self.poll,
                PollTask(job_id=job.id, attempt=1, handle=handle),
            )
            logger.info(
                f"Job {job.id} submitted to {provider.name} "
                f"(external id {handle.external_id}), first poll in "
                f"{self.polling.initial_delay:.0f}s"
            )

        return await self.store.get_job(job.id)

    async def _submit(
        self,
        job_id: str,
        model: str,
        prompt: str,
        duration: int,
    ) -> tuple[VideoProvider, ProviderJobHandle]:
        """Submit to the chosen provider, with at most one fallback hop."""
        provider = self.registry.get(model)
        try:
            return provider, await provider.submit(prompt, duration)
        except (ProviderAuthError, ProviderRequestError) as e:
            fallback_name = self.fallbacks.get(model)
            if not fallback_name or fallback_name == model:
                raise
            logger.warning(
                f"{provider.display_name} unavailable for job {job_id} "
                f"({e.error_code}), falling back to {fallback_name}"
            )

        fallback = self.registry.get(fallback_name)
        return fallback, await fallback.submit(prompt, duration)

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def progress_for(self, attempt: int) -> int:
        """Progress shown while processing; only completion reaches 100."""
        return min(MAX_POLL_PROGRESS, attempt * 100 // self.polling.max_attempts)

    async def poll(self, task: PollTask):
        """
        Run one poll cycle and schedule the next one if the job is still in
        flight. Never raises.
        """
        job_id = task.job_id
        try:
            current = await self.store.get_status(job_id)
            if current is None or current.status.is_terminal:
                logger.warning(f"Poll {task.attempt} skipped, job {job_id} is no longer active")
                self._finish(job_id)
                return

            provider = self.registry.get(task.handle.provider)
            result = await provider.check_status(task.handle)
            logger.debug(
                f"Poll {task.attempt}/{self.polling.max_attempts} for job {job_id}: "
                f"{result.raw_state} -> {result.state.value}"
            )

            if result.has_asset:
                await self._complete(job_id, result)
                return

            if result.state == ProviderState.FAILED:
                reason = result.failure_reason or MESSAGE_FAILED
                logger.error(f"Provider reported failure for job {job_id}: {reason}")
                await self._fail(job_id, reason)
                return

            if task.attempt >= self.polling.max_attempts:
                raise GenerationTimeoutError(provider=provider.name)

            await self.store.transition(
                job_id,
                GenerationStatus.PROCESSING,
                progress=self.progress_for(task.attempt),
                message=MESSAGE_PROCESSING,
            )
            self.scheduler.schedule(
                self.polling.interval,
                self.poll,
                replace(task, attempt=task.attempt + 1),
            )

        except GenerationTimeoutError as e:
            logger.warning(
                f"Job {job_id} timed out after {task.attempt} poll attempts"
            )
            await self._fail_quietly(job_id, e, message=MESSAGE_TIMED_OUT)

        except Exception as e:
            logger.error(f"Error polling job {job_id}: {type(e).__name__}: {e}")
            await self._fail_quietly(job_id, e)

    # ------------------------------------------------------------------
    # Terminal writes
    # ------------------------------------------------------------------

    async def _complete(self, job_id: str, result: NormalizedStatus):
        await self.store.transition(
            job_id,
            GenerationStatus.COMPLETED,
            job_updates={
                "video_url": result.asset_url,
                "thumbnail_url": result.thumbnail_url,
                "metadata": VideoMetadata(
                    resolution=DEFAULT_RESOLUTION,
                    format=DEFAULT_FORMAT,
                    description=result.description,
                ),
            },
            progress=100,
            message=MESSAGE_COMPLETED,
            error=None,
        )
        self._finish(job_id)

    async def _fail(self, job_id: str, error: str, message: str = MESSAGE_FAILED):
        await self.store.transition(
            job_id,
            GenerationStatus.FAILED,
            message=message,
            error=error,
        )
        self._finish(job_id)

    async def _fail_quietly(self, job_id: str, exc: Exception, message: str = MESSAGE_FAILED):
        """Record a poll failure; nothing may escape the background loop."""
        try:
            await self._fail(job_id, str(exc) or type(exc).__name__, message=message)
        except Exception as e:
            logger.error(f"Could not record failure for job {job_id}: {e}")
            self._finish(job_id)

    def _finish(self, job_id: str):
        self._active.discard(job_id)
        event = self._done_events.pop(job_id, None)
        if event:
            event.set()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_job(self, job_id: str) -> Optional[JobRecord]:
        return await self.store.get_job(job_id)

    async def get_status(self, job_id: str) -> Optional[StatusRecord]:
        return await self.store.get_status(job_id)

    def active_jobs(self) -> list[str]:
        """Ids of jobs with a poll chain still running."""
        return sorted(self._active)

    async def wait_for(self, job_id: str, timeout: Optional[float] = None) -> Optional[StatusRecord]:
        """Wait until a job reaches a terminal state and return its status."""
        status = await self.store.get_status(job_id)
        if status is None or status.status.is_terminal:
            return status

        event = self._done_events.setdefault(job_id, asyncio.Event())
        await asyncio.wait_for(event.wait(), timeout)
        return await self.store.get_status(job_id)
