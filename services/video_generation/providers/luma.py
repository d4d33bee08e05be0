"""
Luma Dream Machine provider.

API: https://docs.lumalabs.ai/docs/api
    POST /generations          -> {"id": ...}
    GET  /generations/{id}     -> {"state": ..., "assets": {"video": ...}, "failure_reason": ...}
"""

import logging
from typing import Optional

import httpx

from ..errors import PollError, ProviderRequestError
from ..models import NormalizedStatus, ProviderJobHandle, ProviderState
from .base import VideoProvider

logger = logging.getLogger(__name__)

# Luma accepts "5s" and "9s"; a 10 second request gets the longer clip
LUMA_DURATIONS = {5: "5s", 10: "9s"}


class LumaProvider(VideoProvider):
    """Text-to-video via Luma Dream Machine."""

    name = "luma"
    display_name = "Luma"
    credential_env = "LUMA_API_KEY or DREAM_MACHINE_API_KEY"
    state_map = {
        "queued": ProviderState.QUEUED,
        "pending": ProviderState.QUEUED,
        "dreaming": ProviderState.PROCESSING,
        "processing": ProviderState.PROCESSING,
        "completed": ProviderState.COMPLETED,
        "failed": ProviderState.FAILED,
    }

    def __init__(
        self,
        api_key: str = "",
        api_base: str = "https://api.lumalabs.ai/dream-machine/v1",
        model: str = "ray-2",
        aspect_ratio: str = "16:9",
        timeout: float = 60.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(api_key=api_key, timeout=timeout, http_client=http_client)
        self.api_base = api_base.rstrip("/")
        self.model = model
        self.aspect_ratio = aspect_ratio

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def submit(self, prompt: str, duration_seconds: int) -> ProviderJobHandle:
        self._require_credential()

        payload = {
            "prompt": prompt,
            "model": self.model,
            "aspect_ratio": self.aspect_ratio,
            "duration": LUMA_DURATIONS.get(duration_seconds, "5s"),
        }

        logger.info(f"Luma request: model={self.model}, prompt={prompt[:50]}...")

        response = await self._request(
            "POST",
            f"{self.api_base}/generations",
            "API",
            json=payload,
            headers=self._headers(),
        )
        data = self._parse_json(response, "API")

        generation_id = data.get("id")
        if not generation_id:
            raise ProviderRequestError(
                f"No generation id in Luma API response: {response.text}",
                error_code="NO_TASK_ID",
                provider=self.name,
            )

        logger.info(f"Luma generation created: {generation_id}")
        return ProviderJobHandle(provider=self.name, external_id=generation_id)

    async def check_status(self, handle: ProviderJobHandle) -> NormalizedStatus:
        if not handle.external_id:
            raise PollError("Luma handle has no generation id", provider=self.name)

        response = await self._request(
            "GET",
            f"{self.api_base}/generations/{handle.external_id}",
            "status check",
            headers=self._headers(),
        )
        data = self._parse_json(response, "status check")

        raw_state = data.get("state")
        assets = data.get("assets") or {}

        return NormalizedStatus(
            state=self.normalize_state(raw_state),
            asset_url=assets.get("video"),
            thumbnail_url=assets.get("image"),
            failure_reason=data.get("failure_reason"),
            raw_state=raw_state,
        )
