"""
Provider Adapter Tests

HTTP providers run against httpx.MockTransport; the Gemini client is mocked.

Covers:
1. Luma submit/status mapping and error reporting
2. HeyGen submit/status mapping
3. Gemini concept + stock clip
4. Demo clips
5. Registry lookup and availability

Run with:
    python -m pytest tests/test_providers.py -v
"""

import json
import os
import sys
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from google.genai import errors as genai_errors

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import APIConfig, Config
from services.video_generation import (
    PollError,
    ProviderAuthError,
    ProviderJobHandle,
    ProviderRequestError,
    ProviderState,
    UnknownProviderError,
)
from services.video_generation.providers import (
    DemoProvider,
    GeminiProvider,
    HeyGenProvider,
    LumaProvider,
    ProviderRegistry,
    build_registry,
)
from services.video_generation.providers.stock import STOCK_CLIPS, pick_stock_clip

PROMPT = "A lighthouse in a storm, waves crashing"


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestLumaProvider:
    """Test the Luma Dream Machine adapter."""

    @pytest.mark.asyncio
    async def test_submit_posts_generation(self):
        """Test submit sends the Luma generation request."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"id": "gen-123", "state": "queued"})

        provider = LumaProvider(api_key="luma-key", http_client=mock_client(handler))
        handle = await provider.submit(PROMPT, 10)

        assert handle.provider == "luma"
        assert handle.external_id == "gen-123"
        assert not handle.is_complete
        assert seen["method"] == "POST"
        assert seen["url"].endswith("/dream-machine/v1/generations")
        assert seen["auth"] == "Bearer luma-key"
        assert seen["body"]["prompt"] == PROMPT
        assert seen["body"]["duration"] == "9s"

    @pytest.mark.asyncio
    async def test_submit_without_key_names_env_var(self):
        """Test a missing key names the environment variable."""
        provider = LumaProvider(api_key="")

        with pytest.raises(ProviderAuthError) as exc_info:
            await provider.submit(PROMPT, 5)

        assert "LUMA_API_KEY" in str(exc_info.value)
        assert exc_info.value.error_code == "AUTH_MISSING"

    @pytest.mark.asyncio
    async def test_submit_error_includes_status_and_body(self):
        """Test HTTP errors carry status code and body."""
        def handler(request):
            return httpx.Response(401, text="Unauthorized")

        provider = LumaProvider(api_key="bad", http_client=mock_client(handler))

        with pytest.raises(ProviderRequestError) as exc_info:
            await provider.submit(PROMPT, 5)

        assert str(exc_info.value) == "Luma API error: 401 - Unauthorized"
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_submit_without_id_is_an_error(self):
        """Test a response without an id is an error."""
        def handler(request):
            return httpx.Response(200, json={"state": "queued"})

        provider = LumaProvider(api_key="luma-key", http_client=mock_client(handler))

        with pytest.raises(ProviderRequestError):
            await provider.submit(PROMPT, 5)

    @pytest.mark.asyncio
    async def test_check_status_states(self):
        """Test Luma states map to normalized states."""
        responses = {
            "gen-q": {"state": "queued"},
            "gen-d": {"state": "dreaming"},
            "gen-c": {
                "state": "completed",
                "assets": {
                    "video": "https://cdn.example.com/gen-c.mp4",
                    "image": "https://cdn.example.com/gen-c.jpg",
                },
            },
            "gen-f": {"state": "failed", "failure_reason": "prompt rejected"},
            "gen-x": {"state": "teleporting"},
        }

        def handler(request):
            generation_id = request.url.path.rsplit("/", 1)[-1]
            return httpx.Response(200, json=responses[generation_id])

        provider = LumaProvider(api_key="luma-key", http_client=mock_client(handler))

        def handle(external_id):
            return ProviderJobHandle(provider="luma", external_id=external_id)

        assert (await provider.check_status(handle("gen-q"))).state == ProviderState.QUEUED
        assert (await provider.check_status(handle("gen-d"))).state == ProviderState.PROCESSING
        # Unknown states keep the job in flight
        assert (await provider.check_status(handle("gen-x"))).state == ProviderState.PROCESSING

        done = await provider.check_status(handle("gen-c"))
        assert done.state == ProviderState.COMPLETED
        assert done.has_asset
        assert done.asset_url == "https://cdn.example.com/gen-c.mp4"
        assert done.thumbnail_url == "https://cdn.example.com/gen-c.jpg"

        failed = await provider.check_status(handle("gen-f"))
        assert failed.state == ProviderState.FAILED
        assert failed.failure_reason == "prompt rejected"

    @pytest.mark.asyncio
    async def test_completed_without_asset_has_no_asset(self):
        """Test completed without a video is not an asset."""
        def handler(request):
            return httpx.Response(200, json={"state": "completed", "assets": {}})

        provider = LumaProvider(api_key="luma-key", http_client=mock_client(handler))
        result = await provider.check_status(ProviderJobHandle("luma", "gen-1"))

        assert result.state == ProviderState.COMPLETED
        assert not result.has_asset

    @pytest.mark.asyncio
    async def test_check_status_http_error(self):
        """Test status check HTTP errors."""
        def handler(request):
            return httpx.Response(500, text="upstream exploded")

        provider = LumaProvider(api_key="luma-key", http_client=mock_client(handler))

        with pytest.raises(ProviderRequestError) as exc_info:
            await provider.check_status(ProviderJobHandle("luma", "gen-1"))

        assert "500" in str(exc_info.value)
        assert "upstream exploded" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_check_status_invalid_json(self):
        """Test a non-JSON status body raises PollError."""
        def handler(request):
            return httpx.Response(200, text="<html>not json</html>")

        provider = LumaProvider(api_key="luma-key", http_client=mock_client(handler))

        with pytest.raises(PollError):
            await provider.check_status(ProviderJobHandle("luma", "gen-1"))

    @pytest.mark.asyncio
    async def test_transport_error_is_request_error(self):
        """Test connection failures raise ProviderRequestError."""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        provider = LumaProvider(api_key="luma-key", http_client=mock_client(handler))

        with pytest.raises(ProviderRequestError):
            await provider.check_status(ProviderJobHandle("luma", "gen-1"))


class TestHeyGenProvider:
    """Test the HeyGen adapter."""

    @pytest.mark.asyncio
    async def test_submit_sends_script(self):
        """Test submit sends the prompt as the avatar script."""
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["key"] = request.headers.get("X-Api-Key")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"error": None, "data": {"video_id": "vid-9"}})

        provider = HeyGenProvider(api_key="hg-key", http_client=mock_client(handler))
        handle = await provider.submit(PROMPT, 5)

        assert handle.provider == "heygen"
        assert handle.external_id == "vid-9"
        assert seen["url"].endswith("/v2/video/generate")
        assert seen["key"] == "hg-key"
        assert seen["body"]["video_inputs"][0]["voice"]["input_text"] == PROMPT

    @pytest.mark.asyncio
    async def test_submit_without_key(self):
        """Test a missing HeyGen key names the environment variable."""
        with pytest.raises(ProviderAuthError) as exc_info:
            await HeyGenProvider(api_key="").submit(PROMPT, 5)

        assert "HEYGEN_API_KEY" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_check_status_mapping(self):
        """Test HeyGen states map to normalized states."""
        responses = {
            "v-wait": {"data": {"status": "waiting"}},
            "v-proc": {"data": {"status": "processing"}},
            "v-done": {
                "data": {
                    "status": "completed",
                    "video_url": "https://cdn.example.com/v-done.mp4",
                    "thumbnail_url": "https://cdn.example.com/v-done.jpg",
                }
            },
            "v-fail": {"data": {"status": "failed", "error": {"message": "avatar unavailable"}}},
        }

        def handler(request):
            assert request.url.path == "/v1/video_status.get"
            return httpx.Response(200, json=responses[request.url.params["video_id"]])

        provider = HeyGenProvider(api_key="hg-key", http_client=mock_client(handler))

        def handle(external_id):
            return ProviderJobHandle(provider="heygen", external_id=external_id)

        assert (await provider.check_status(handle("v-wait"))).state == ProviderState.QUEUED
        assert (await provider.check_status(handle("v-proc"))).state == ProviderState.PROCESSING

        done = await provider.check_status(handle("v-done"))
        assert done.has_asset
        assert done.thumbnail_url == "https://cdn.example.com/v-done.jpg"

        failed = await provider.check_status(handle("v-fail"))
        assert failed.state == ProviderState.FAILED
        assert failed.failure_reason == "avatar unavailable"

    @pytest.mark.asyncio
    async def test_check_status_missing_data(self):
        """Test a status body without data raises PollError."""
        def handler(request):
            return httpx.Response(200, json={"code": 100})

        provider = HeyGenProvider(api_key="hg-key", http_client=mock_client(handler))

        with pytest.raises(PollError):
            await provider.check_status(ProviderJobHandle("heygen", "v-1"))


class TestGeminiProvider:
    """Test the synchronous Gemini adapter."""

    def make_client(self, text):
        client = MagicMock()
        client.aio.models.generate_content = AsyncMock(return_value=MagicMock(text=text))
        return client

    @pytest.mark.asyncio
    async def test_submit_completes_immediately(self):
        """Test Gemini returns a finished clip with its concept."""
        client = self.make_client("Slow push-in on the lighthouse, lit by lightning.")
        provider = GeminiProvider(api_key="g-key", client=client)

        handle = await provider.submit(PROMPT, 5)

        assert handle.is_complete
        assert handle.result.asset_url == pick_stock_clip(PROMPT, 5).video_url
        assert handle.result.description == "Slow push-in on the lighthouse, lit by lightning."
        client.aio.models.generate_content.assert_awaited_once()
        assert client.aio.models.generate_content.await_args.kwargs["model"] == "gemini-2.0-flash"

    @pytest.mark.asyncio
    async def test_empty_concept_falls_back_to_prompt(self):
        """Test an empty concept falls back to the prompt."""
        provider = GeminiProvider(api_key="g-key", client=self.make_client(None))

        handle = await provider.submit(PROMPT, 10)

        assert handle.result.description == PROMPT

    @pytest.mark.asyncio
    async def test_check_status_returns_stored_result(self):
        """Test check_status returns the submit result."""
        provider = GeminiProvider(api_key="g-key", client=self.make_client("concept"))
        handle = await provider.submit(PROMPT, 5)

        result = await provider.check_status(handle)

        assert result is handle.result

    @pytest.mark.asyncio
    async def test_submit_without_key(self):
        """Test a missing Gemini key skips the API call."""
        client = self.make_client("unused")
        provider = GeminiProvider(api_key="", client=client)

        with pytest.raises(ProviderAuthError) as exc_info:
            await provider.submit(PROMPT, 5)

        assert "GEMINI_API_KEY" in str(exc_info.value)
        client.aio.models.generate_content.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_api_error_maps_to_request_error(self):
        """Test SDK API errors become ProviderRequestError with the HTTP code."""
        client = MagicMock()
        client.aio.models.generate_content = AsyncMock(
            side_effect=genai_errors.ClientError(
                404,
                {"error": {"code": 404, "message": "model not found", "status": "NOT_FOUND"}},
            )
        )
        provider = GeminiProvider(api_key="g-key", client=client)

        with pytest.raises(ProviderRequestError) as exc_info:
            await provider.submit(PROMPT, 5)

        assert exc_info.value.error_code == "HTTP_404"
        assert exc_info.value.status_code == 404
        assert "Gemini API error: 404" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_transport_error_maps_to_request_error(self):
        """Test network failures from the SDK become ProviderRequestError."""
        client = MagicMock()
        client.aio.models.generate_content = AsyncMock(
            side_effect=httpx.ConnectError("connection refused")
        )
        provider = GeminiProvider(api_key="g-key", client=client)

        with pytest.raises(ProviderRequestError) as exc_info:
            await provider.submit(PROMPT, 5)

        assert exc_info.value.error_code == "REQUEST_ERROR"
        assert "connection refused" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_timeout_maps_to_request_error(self):
        """Test SDK timeouts become ProviderRequestError."""
        client = MagicMock()
        client.aio.models.generate_content = AsyncMock(
            side_effect=httpx.ReadTimeout("read timed out")
        )
        provider = GeminiProvider(api_key="g-key", client=client)

        with pytest.raises(ProviderRequestError) as exc_info:
            await provider.submit(PROMPT, 5)

        assert exc_info.value.error_code == "TIMEOUT"


class TestDemoProvider:
    """Test demo clips."""

    @pytest.mark.asyncio
    async def test_demo_needs_no_credential(self):
        """Test demo works without a key."""
        provider = DemoProvider()
        handle = await provider.submit(PROMPT, 5)

        assert provider.is_configured
        assert not provider.requires_credential
        assert handle.is_complete
        assert handle.result.asset_url.endswith(".mp4")
        assert handle.result.thumbnail_url

    @pytest.mark.asyncio
    async def test_same_prompt_same_clip(self):
        """Test clip choice is deterministic."""
        provider = DemoProvider()
        first = await provider.submit(PROMPT, 5)
        second = await provider.submit(PROMPT, 5)

        assert first.result.asset_url == second.result.asset_url
        assert first.external_id == second.external_id

    def test_stock_clips_cover_library(self):
        """Test prompts spread across every stock clip."""
        picks = {
            pick_stock_clip(f"Prompt number {i} for the stock library", 5).name
            for i in range(200)
        }
        assert picks == {clip.name for clip in STOCK_CLIPS}


class TestProviderRegistry:
    """Test provider lookup."""

    def test_unknown_provider(self):
        """Test lookup of an unregistered provider."""
        registry = ProviderRegistry([DemoProvider()])

        with pytest.raises(UnknownProviderError):
            registry.get("sora")

    def test_duplicate_registration(self):
        """Test registering a name twice needs replace=True."""
        registry = ProviderRegistry([DemoProvider()])

        with pytest.raises(ValueError):
            registry.register(DemoProvider())

        registry.register(DemoProvider(), replace=True)
        assert registry.names() == ["demo"]

    def test_build_registry_availability(self):
        """Test availability follows configured keys."""
        config = Config(
            api=APIConfig(
                luma_api_key="luma-key",
                gemini_api_key="",
                heygen_api_key="",
            ),
            fallbacks={},
        )
        registry = build_registry(config)

        assert set(registry.names()) == {"luma", "gemini", "heygen", "demo"}
        assert registry.availability() == {
            "luma": True,
            "gemini": False,
            "heygen": False,
            "demo": True,
        }
        assert registry.any_credentialed()

    def test_demo_alone_is_not_api_connected(self):
        """Test demo does not count as a credentialed provider."""
        config = Config(
            api=APIConfig(luma_api_key="", gemini_api_key="", heygen_api_key=""),
            fallbacks={},
        )

        assert not build_registry(config).any_credentialed()
