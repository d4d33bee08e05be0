"""
Gemini provider.

Gemini writes a short shot description for the prompt and the clip is taken
from the stock library, so the job is finished as soon as submit returns.
"""

import logging
from typing import Any, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..errors import ProviderRequestError
from ..models import NormalizedStatus, ProviderJobHandle, ProviderState
from .base import SynchronousProvider
from .stock import clip_id, pick_stock_clip

logger = logging.getLogger(__name__)

CONCEPT_PROMPT = """You are a film director writing a single shot description.

Describe, in at most two sentences, the {duration}-second video shot for this idea:
"{prompt}"

Mention the camera movement and the lighting. Respond with the description only."""


class GeminiProvider(SynchronousProvider):
    """Concept generation via Gemini with an immediate stock clip."""

    name = "gemini"
    display_name = "Gemini"
    credential_env = "GEMINI_API_KEY or GOOGLE_API_KEY"

    def __init__(
        self,
        api_key: str = "",
        model: str = "gemini-2.0-flash",
        timeout: float = 60.0,
        client: Optional[Any] = None,
    ):
        super().__init__(api_key=api_key, timeout=timeout)
        self.model = model
        self._client = client

    def _get_genai_client(self):
        """Get or create the Gemini client (lazy-loaded)."""
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def _write_concept(self, prompt: str, duration_seconds: int) -> str:
        client = self._get_genai_client()
        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=CONCEPT_PROMPT.format(prompt=prompt, duration=duration_seconds),
                config=types.GenerateContentConfig(
                    temperature=0.7,
                    max_output_tokens=200,
                ),
            )
        except genai_errors.APIError as e:
            raise ProviderRequestError(
                f"Gemini API error: {e.code} - {e.message}",
                error_code=f"HTTP_{e.code}",
                provider=self.name,
                status_code=e.code,
                body=str(e.message),
            ) from e
        except httpx.TimeoutException as e:
            raise ProviderRequestError(
                f"Gemini API timeout: {type(e).__name__}",
                error_code="TIMEOUT",
                provider=self.name,
            ) from e
        except httpx.RequestError as e:
            raise ProviderRequestError(
                f"Gemini API failed: {type(e).__name__}: {e}",
                error_code="REQUEST_ERROR",
                provider=self.name,
            ) from e

        return (response.text or "").strip()

    async def submit(self, prompt: str, duration_seconds: int) -> ProviderJobHandle:
        self._require_credential()

        logger.info(f"Gemini request: model={self.model}, prompt={prompt[:50]}...")
        concept = await self._write_concept(prompt, duration_seconds)
        if not concept:
            logger.warning("Gemini returned an empty concept, using the prompt")
            concept = prompt

        clip = pick_stock_clip(prompt, duration_seconds)
        return ProviderJobHandle(
            provider=self.name,
            external_id=f"gemini-{clip_id(prompt, duration_seconds)}",
            result=NormalizedStatus(
                state=ProviderState.COMPLETED,
                asset_url=clip.video_url,
                thumbnail_url=clip.thumbnail_url,
                description=concept,
                raw_state="completed",
            ),
        )

    async def close(self):
        await super().close()
        self._client = None
