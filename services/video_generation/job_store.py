"""
Job Store - In-memory records for video generation jobs.

Holds two maps keyed by job id:
- job records (request + result)
- status records (progress, message, error)

Records live for the lifetime of the process. Nothing is evicted and nothing
survives a restart.
"""

import logging
import uuid
from dataclasses import fields, replace
from typing import Optional

from .errors import InvalidStatusTransition
from .models import (
    GenerationStatus,
    JobRecord,
    StatusRecord,
    MESSAGE_QUEUED,
)

logger = logging.getLogger(__name__)

_JOB_FIELDS = {f.name for f in fields(JobRecord)} - {"id"}
_STATUS_FIELDS = {f.name for f in fields(StatusRecord)} - {"id"}


def _check_fields(updates: dict, allowed: set[str], kind: str):
    unknown = set(updates) - allowed
    if unknown:
        raise ValueError(f"Unknown {kind} field(s): {', '.join(sorted(unknown))}")


class JobStore:
    """
    Keeps video generation jobs in process memory.

    Usage:
        store = JobStore()

        # Record new job (status record is created alongside)
        job = await store.create(prompt, duration=5, model="luma")

        # Move both records to a new status
        await store.transition(job.id, GenerationStatus.PROCESSING, progress=10)

        # Read back
        status = await store.get_status(job.id)
    """

    def __init__(self):
        self._jobs: dict[str, JobRecord] = {}
        self._statuses: dict[str, StatusRecord] = {}

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, job_id: str) -> bool:
        return job_id in self._jobs

    async def count(self) -> int:
        return len(self._jobs)

    async def create(
        self,
        prompt: str,
        duration: int,
        model: str,
        status: GenerationStatus = GenerationStatus.PENDING,
    ) -> JobRecord:
        """
        Create a new job record and its matching status record.

        Args:
            prompt: Text prompt for the video
            duration: Requested length in seconds
            model: Selected provider name
            status: Initial lifecycle status

        Returns:
            A copy of the stored job record, including its fresh id
        """
        job_id = str(uuid.uuid4())
        while job_id in self._jobs:
            job_id = str(uuid.uuid4())

        job = JobRecord(
            id=job_id,
            prompt=prompt,
            duration=duration,
            model=model,
            status=status,
        )
        self._jobs[job_id] = job
        self._statuses[job_id] = StatusRecord(
            id=job_id,
            status=status,
            progress=0,
            message=MESSAGE_QUEUED,
        )

        logger.info(f"Created job {job_id} (model={model}, duration={duration}s)")
        return replace(job)

    async def get_job(self, job_id: str) -> Optional[JobRecord]:
        """Get a copy of a job record, or None."""
        job = self._jobs.get(job_id)
        return replace(job) if job else None

    async def get_status(self, job_id: str) -> Optional[StatusRecord]:
        """Get a copy of a status record, or None."""
        status = self._statuses.get(job_id)
        return replace(status) if status else None

    async def list_jobs(self) -> list[JobRecord]:
        """Copies of all job records, oldest first."""
        return sorted((replace(job) for job in self._jobs.values()), key=lambda j: j.created_at)

    async def update_status(self, job_id: str, **updates):
        """
        Merge fields into a status record.

        Unknown ids are ignored. A status change is checked against the
        forward-only lifecycle and mirrored onto the job record.
        """
        _check_fields(updates, _STATUS_FIELDS, "status")
        current = self._statuses.get(job_id)
        if current is None:
            logger.debug(f"update_status ignored for unknown job {job_id}")
            return

        if "status" in updates:
            updates["status"] = GenerationStatus(updates["status"])
            self._check_transition(job_id, current.status, updates["status"])
            self._jobs[job_id] = replace(self._jobs[job_id], status=updates["status"])

        self._statuses[job_id] = replace(current, **updates)

    async def update_job(self, job_id: str, **updates):
        """
        Merge fields into a job record.

        Unknown ids are ignored. A status change is checked against the
        forward-only lifecycle and mirrored onto the status record.
        """
        _check_fields(updates, _JOB_FIELDS, "job")
        current = self._jobs.get(job_id)
        if current is None:
            logger.debug(f"update_job ignored for unknown job {job_id}")
            return

        if "status" in updates:
            updates["status"] = GenerationStatus(updates["status"])
            self._check_transition(job_id, current.status, updates["status"])
            self._statuses[job_id] = replace(self._statuses[job_id], status=updates["status"])

        self._jobs[job_id] = replace(current, **updates)

    async def transition(
        self,
        job_id: str,
        status: GenerationStatus,
        job_updates: Optional[dict] = None,
        **status_updates,
    ):
        """
        Move a job to a new status in both records at once.

        Args:
            job_id: Job id
            status: New lifecycle status
            job_updates: Extra job record fields written in the same step
            **status_updates: Extra status record fields (progress, message, error)
        """
        job_updates = dict(job_updates or {})
        _check_fields(job_updates, _JOB_FIELDS - {"status"}, "job")
        _check_fields(status_updates, _STATUS_FIELDS - {"status"}, "status")
        status = GenerationStatus(status)
        job = self._jobs.get(job_id)
        if job is None:
            logger.debug(f"transition ignored for unknown job {job_id}")
            return

        self._check_transition(job_id, job.status, status)
        self._jobs[job_id] = replace(job, status=status, **job_updates)
        self._statuses[job_id] = replace(
            self._statuses[job_id], status=status, **status_updates
        )

        if job.status != status:
            logger.info(f"Job {job_id}: {job.status.value} -> {status.value}")

    @staticmethod
    def _check_transition(job_id: str, current: GenerationStatus, requested: GenerationStatus):
        if current == requested and not current.is_terminal:
            return
        if not current.can_transition_to(requested):
            raise InvalidStatusTransition(job_id, current.value, requested.value)
