"""
Shared fixtures for the video generation tests.

ManualScheduler stands in for the asyncio timers: it records every scheduled
poll cycle and only runs one when a test asks it to, so a full poll chain
runs without any real waiting.
"""

import os
import sys
from typing import Optional

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import PollingConfig
from services.video_generation.models import (
    NormalizedStatus,
    ProviderJobHandle,
    ProviderState,
)
from services.video_generation.providers import DemoProvider, ProviderRegistry, VideoProvider


class ManualScheduler:
    """Scheduler driven by the test instead of a clock."""

    def __init__(self):
        self.scheduled = []
        self.delays = []

    def schedule(self, delay, callback, task):
        self.scheduled.append((delay, callback, task))
        self.delays.append(delay)

    @property
    def pending(self) -> int:
        return len(self.scheduled)

    async def run_next(self):
        """Run the oldest scheduled cycle; returns its task or None."""
        if not self.scheduled:
            return None
        _, callback, task = self.scheduled.pop(0)
        await callback(task)
        return task

    async def run_all(self, limit: int = 1000) -> int:
        """Run cycles until nothing is scheduled; returns how many ran."""
        ran = 0
        while self.scheduled and ran < limit:
            await self.run_next()
            ran += 1
        return ran


class ScriptedProvider(VideoProvider):
    """
    Asynchronous provider that replays a list of status reports.

    The last report repeats once the script runs out.
    """

    name = "scripted"
    display_name = "Scripted"

    def __init__(
        self,
        script: Optional[list] = None,
        name: str = "scripted",
        submit_error: Optional[Exception] = None,
    ):
        super().__init__()
        self.name = name
        self.script = list(script or [NormalizedStatus(state=ProviderState.PROCESSING)])
        self.submit_error = submit_error
        self.submit_calls = []
        self.check_calls = 0

    async def submit(self, prompt: str, duration_seconds: int) -> ProviderJobHandle:
        self.submit_calls.append((prompt, duration_seconds))
        if self.submit_error is not None:
            raise self.submit_error
        return ProviderJobHandle(provider=self.name, external_id=f"{self.name}-ext-1")

    async def check_status(self, handle: ProviderJobHandle):
        self.check_calls += 1
        index = min(self.check_calls - 1, len(self.script) - 1)
        step = self.script[index]
        if isinstance(step, Exception):
            raise step
        return step


def processing(raw_state: str = "dreaming") -> NormalizedStatus:
    return NormalizedStatus(state=ProviderState.PROCESSING, raw_state=raw_state)


def completed(url: str = "https://cdn.example.com/v.mp4", thumb: str = "https://cdn.example.com/v.jpg"):
    return NormalizedStatus(
        state=ProviderState.COMPLETED,
        asset_url=url,
        thumbnail_url=thumb,
        raw_state="completed",
    )


def failed(reason: Optional[str] = "content policy") -> NormalizedStatus:
    return NormalizedStatus(state=ProviderState.FAILED, failure_reason=reason, raw_state="failed")


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def polling():
    return PollingConfig(initial_delay=2, interval=5, max_attempts=60)


@pytest.fixture
def demo_registry():
    return ProviderRegistry([DemoProvider()])
