"""
Error taxonomy for video generation.

Submission errors propagate to the caller that started the job. Errors raised
while polling never escape the poll loop; they are stored on the job as a
terminal failure instead.
"""

from typing import Optional


class VideoGenerationError(Exception):
    """Raised when video generation fails."""

    error_code: Optional[str] = None

    def __init__(self, message: str, error_code: str = None, provider: str = None):
        if error_code is not None:
            self.error_code = error_code
        self.provider = provider
        super().__init__(message)


class InvalidGenerationRequest(VideoGenerationError):
    """The prompt, duration or model of a request is not acceptable."""

    error_code = "INVALID_REQUEST"


class UnknownProviderError(InvalidGenerationRequest):
    """No adapter is registered under the requested provider name."""

    error_code = "UNKNOWN_PROVIDER"


class ProviderAuthError(VideoGenerationError):
    """The provider has no credential configured."""

    error_code = "AUTH_MISSING"


class ProviderRequestError(VideoGenerationError):
    """The provider answered with a non-success status or could not be reached."""

    error_code = "REQUEST_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str = None,
        provider: str = None,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        self.status_code = status_code
        self.body = body
        super().__init__(message, error_code=error_code, provider=provider)


class PollError(VideoGenerationError):
    """A status check returned something that could not be interpreted."""

    error_code = "POLL_ERROR"


class GenerationTimeoutError(VideoGenerationError):
    """The provider did not reach a terminal state within the attempt cap."""

    error_code = "TIMEOUT"

    def __init__(self, message: str = "Video generation timed out", **kwargs):
        super().__init__(message, **kwargs)


class InvalidStatusTransition(ValueError):
    """A status write would move a job backwards or out of a terminal state."""

    def __init__(self, job_id: str, current: str, requested: str):
        self.job_id = job_id
        self.current = current
        self.requested = requested
        super().__init__(f"Job {job_id}: cannot move from '{current}' to '{requested}'")
