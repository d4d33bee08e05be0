"""Demo provider: instant placeholder videos, no credential and no network."""

import logging

from ..models import NormalizedStatus, ProviderJobHandle, ProviderState
from .base import SynchronousProvider
from .stock import clip_id, pick_stock_clip

logger = logging.getLogger(__name__)


class DemoProvider(SynchronousProvider):
    """Synthesizes a finished placeholder clip for any prompt."""

    name = "demo"
    display_name = "Demo"

    async def submit(self, prompt: str, duration_seconds: int) -> ProviderJobHandle:
        clip = pick_stock_clip(prompt, duration_seconds)
        external_id = f"demo-{clip_id(prompt, duration_seconds)}"
        logger.info(f"Demo clip {clip.name} selected for {external_id}")

        return ProviderJobHandle(
            provider=self.name,
            external_id=external_id,
            result=NormalizedStatus(
                state=ProviderState.COMPLETED,
                asset_url=clip.video_url,
                thumbnail_url=clip.thumbnail_url,
                description=f"Demo concept for: {prompt[:80]}",
                raw_state="completed",
            ),
        )
