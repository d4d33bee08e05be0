"""
HeyGen avatar video provider.

The prompt is spoken by a stock avatar.

API: https://docs.heygen.com/reference
    POST /v2/video/generate                 -> {"data": {"video_id": ...}}
    GET  /v1/video_status.get?video_id=...  -> {"data": {"status": ..., "video_url": ...}}
"""

import logging
from typing import Optional

import httpx

from ..errors import PollError, ProviderRequestError
from ..models import NormalizedStatus, ProviderJobHandle, ProviderState
from .base import VideoProvider

logger = logging.getLogger(__name__)


class HeyGenProvider(VideoProvider):
    """Avatar videos via HeyGen."""

    name = "heygen"
    display_name = "HeyGen"
    credential_env = "HEYGEN_API_KEY"
    state_map = {
        "pending": ProviderState.QUEUED,
        "waiting": ProviderState.QUEUED,
        "processing": ProviderState.PROCESSING,
        "completed": ProviderState.COMPLETED,
        "failed": ProviderState.FAILED,
    }

    def __init__(
        self,
        api_key: str = "",
        api_base: str = "https://api.heygen.com",
        avatar_id: str = "Daisy-inskirt-20220818",
        voice_id: str = "2d5b0e6cf36f460aa7fc47e3eee4ba54",
        width: int = 1280,
        height: int = 720,
        timeout: float = 60.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(api_key=api_key, timeout=timeout, http_client=http_client)
        self.api_base = api_base.rstrip("/")
        self.avatar_id = avatar_id
        self.voice_id = voice_id
        self.width = width
        self.height = height

    def _headers(self) -> dict:
        return {
            "X-Api-Key": self.api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def submit(self, prompt: str, duration_seconds: int) -> ProviderJobHandle:
        self._require_credential()

        # Duration follows from the length of the spoken script
        payload = {
            "video_inputs": [
                {
                    "character": {
                        "type": "avatar",
                        "avatar_id": self.avatar_id,
                        "avatar_style": "normal",
                    },
                    "voice": {
                        "type": "text",
                        "input_text": prompt,
                        "voice_id": self.voice_id,
                    },
                }
            ],
            "dimension": {"width": self.width, "height": self.height},
        }

        logger.info(f"HeyGen request: avatar={self.avatar_id}, prompt={prompt[:50]}...")

        response = await self._request(
            "POST",
            f"{self.api_base}/v2/video/generate",
            "API",
            json=payload,
            headers=self._headers(),
        )
        data = self._parse_json(response, "API")

        if data.get("error"):
            raise ProviderRequestError(
                f"HeyGen API error: {response.status_code} - {response.text}",
                error_code="HEYGEN_ERROR",
                provider=self.name,
                status_code=response.status_code,
                body=response.text,
            )

        video_id = (data.get("data") or {}).get("video_id")
        if not video_id:
            raise ProviderRequestError(
                f"No video_id in HeyGen API response: {response.text}",
                error_code="NO_TASK_ID",
                provider=self.name,
            )

        logger.info(f"HeyGen video created: {video_id}")
        return ProviderJobHandle(provider=self.name, external_id=video_id)

    async def check_status(self, handle: ProviderJobHandle) -> NormalizedStatus:
        if not handle.external_id:
            raise PollError("HeyGen handle has no video id", provider=self.name)

        response = await self._request(
            "GET",
            f"{self.api_base}/v1/video_status.get",
            "status check",
            params={"video_id": handle.external_id},
            headers=self._headers(),
        )
        data = self._parse_json(response, "status check")

        record = data.get("data")
        if not isinstance(record, dict):
            raise PollError(
                f"HeyGen status response missing data: {response.text[:200]}",
                provider=self.name,
            )

        raw_state = record.get("status")
        error = record.get("error")
        if isinstance(error, dict):
            failure_reason = error.get("message") or error.get("detail")
        else:
            failure_reason = error

        return NormalizedStatus(
            state=self.normalize_state(raw_state),
            asset_url=record.get("video_url"),
            thumbnail_url=record.get("thumbnail_url"),
            failure_reason=failure_reason,
            raw_state=raw_state,
        )
