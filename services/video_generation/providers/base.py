"""
Base class for video generation provider adapters.

Every adapter exposes the same two calls:
- submit(prompt, duration) -> ProviderJobHandle
- check_status(handle) -> NormalizedStatus

Adapters that finish synchronously put the completed result on the handle
and are never polled.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from ..errors import PollError, ProviderAuthError, ProviderRequestError
from ..models import NormalizedStatus, ProviderJobHandle, ProviderState

logger = logging.getLogger(__name__)


class VideoProvider(ABC):
    """
    Common plumbing for provider adapters: credential checks, a lazily
    created HTTP client and error translation for non-success responses.
    """

    name: str = "base"
    display_name: str = "Base provider"
    # Environment variable(s) that hold the credential, used in error messages
    credential_env: Optional[str] = None
    # Provider state -> normalized state; anything missing maps to PROCESSING
    state_map: dict[str, ProviderState] = {}

    def __init__(
        self,
        api_key: str = "",
        timeout: float = 60.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self._http_client = http_client

    @property
    def requires_credential(self) -> bool:
        return self.credential_env is not None

    @property
    def is_configured(self) -> bool:
        """True when the provider can accept work."""
        return not self.requires_credential or bool(self.api_key)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
        return self._http_client

    async def close(self):
        """Close the HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    def _require_credential(self):
        if not self.is_configured:
            raise ProviderAuthError(
                f"{self.display_name} API key not configured. "
                f"Please set {self.credential_env} environment variable.",
                provider=self.name,
            )

    def normalize_state(self, raw_state: Optional[str]) -> ProviderState:
        """Map a provider state string; unknown states stay in flight."""
        state = (raw_state or "").lower()
        return self.state_map.get(state, ProviderState.PROCESSING)

    async def _request(self, method: str, url: str, action: str, **kwargs) -> httpx.Response:
        """
        Send a request and raise ProviderRequestError on transport failure or
        a non-2xx status. The error message carries the status code and the
        raw response body.
        """
        client = await self._get_client()
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise ProviderRequestError(
                f"{self.display_name} {action} timeout: {type(e).__name__}",
                error_code="TIMEOUT",
                provider=self.name,
            ) from e
        except httpx.RequestError as e:
            raise ProviderRequestError(
                f"{self.display_name} {action} failed: {type(e).__name__}: {e}",
                error_code="REQUEST_ERROR",
                provider=self.name,
            ) from e

        if not response.is_success:
            logger.error(
                f"{self.display_name} {action} returned HTTP {response.status_code}"
            )
            raise ProviderRequestError(
                f"{self.display_name} {action} error: {response.status_code} - {response.text}",
                error_code=f"HTTP_{response.status_code}",
                provider=self.name,
                status_code=response.status_code,
                body=response.text,
            )

        return response

    def _parse_json(self, response: httpx.Response, action: str) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise PollError(
                f"{self.display_name} {action} returned invalid JSON: {response.text[:200]}",
                provider=self.name,
            ) from e
        if not isinstance(data, dict):
            raise PollError(
                f"{self.display_name} {action} returned unexpected payload: {type(data).__name__}",
                provider=self.name,
            )
        return data

    @abstractmethod
    async def submit(self, prompt: str, duration_seconds: int) -> ProviderJobHandle:
        """Start a generation job."""
        raise NotImplementedError

    @abstractmethod
    async def check_status(self, handle: ProviderJobHandle) -> NormalizedStatus:
        """Report the current state of a submitted job."""
        raise NotImplementedError


class SynchronousProvider(VideoProvider):
    """Provider whose submit already returns the finished asset."""

    async def check_status(self, handle: ProviderJobHandle) -> NormalizedStatus:
        if handle.result is None:
            raise PollError(
                f"{self.display_name} job {handle.external_id} has no result",
                provider=self.name,
            )
        return handle.result
