#!/usr/bin/env python3
"""
Video Generation Service - Main Entry Point

Usage:
    # Start the HTTP API
    python main.py server

    # Generate a single video in-process and follow its progress
    python main.py generate --prompt "A paper boat drifting down a rainy street" --model luma

    # Show which providers are configured
    python main.py health

    # Query a running server
    python main.py status --server http://localhost:5000 <job-id>
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from core.config import get_config
from core.logging import setup_logging

logger = logging.getLogger("videogen")


def start_server(host: str, port: int, reload: bool = False):
    """Start the FastAPI server."""
    import uvicorn

    logger.info(f"Video generation server running at http://{host}:{port}")
    uvicorn.run("services.api.server:app", host=host, port=port, reload=reload)


async def generate_video(prompt: str, duration: int = 5, model: str = "demo") -> bool:
    """
    Generate a video in-process and print status lines until it finishes.

    Args:
        prompt: Text description of the video
        duration: 5 or 10 seconds
        model: Provider name

    Returns:
        True if the video completed
    """
    from services.video_generation import (
        AsyncioScheduler,
        GenerationOrchestrator,
        JobStore,
        VideoGenerationError,
        build_registry,
    )

    config = get_config()
    registry = build_registry(config)
    scheduler = AsyncioScheduler()
    orchestrator = GenerationOrchestrator(
        store=JobStore(),
        registry=registry,
        scheduler=scheduler,
        polling=config.polling,
        fallbacks=config.fallbacks,
    )

    try:
        try:
            job = await orchestrator.generate(prompt, duration, model)
        except VideoGenerationError as e:
            print(f"[failed] {e}")
            return False

        print(f"Job {job.id} ({job.provider or job.model})")

        last_line: Optional[str] = None
        while True:
            status = await orchestrator.get_status(job.id)
            line = f"[{status.status.value}] {status.progress:3d}% {status.message}"
            if line != last_line:
                print(line)
                last_line = line
            if status.status.is_terminal:
                break
            await asyncio.sleep(1)

        final = await orchestrator.get_job(job.id)
        if status.error:
            print(f"Error: {status.error}")
            return False

        print(f"Video: {final.video_url}")
        if final.thumbnail_url:
            print(f"Thumbnail: {final.thumbnail_url}")
        return True

    finally:
        await scheduler.shutdown()
        await registry.close()


def show_health() -> bool:
    """Print provider availability and configuration issues."""
    from services.video_generation import build_registry

    config = get_config()
    registry = build_registry(config)

    print("Providers:")
    for name, available in registry.availability().items():
        print(f"  - {name}: {'available' if available else 'not configured'}")

    print(f"Polling: {config.polling.max_attempts} attempts every "
          f"{config.polling.interval:.0f}s (max wait {config.polling.max_wait_seconds:.0f}s)")
    if config.fallbacks:
        for source, target in config.fallbacks.items():
            print(f"Fallback: {source} -> {target}")

    issues = config.validate(registry.names())
    for issue in issues:
        print(f"Warning: {issue}")
    return True


async def check_status(server: str, job_id: Optional[str]) -> bool:
    """Query a running server for health or a job's status."""
    import httpx

    async with httpx.AsyncClient(base_url=server, timeout=10.0) as client:
        try:
            if job_id:
                resp = await client.get(f"/api/videos/{job_id}/status")
            else:
                resp = await client.get("/api/health")
        except httpx.RequestError as e:
            print(f"Cannot connect to server: {e}")
            return False

    data = resp.json()
    if resp.status_code != 200:
        print(f"Server returned status {resp.status_code}: {data.get('message')}")
        return False

    if job_id:
        print(f"Job {data['id']}: {data['status']} ({data.get('progress', 0)}%)")
        if data.get("message"):
            print(f"  {data['message']}")
        if data.get("error"):
            print(f"  Error: {data['error']}")
    else:
        print(f"Server: {server}")
        print(f"API connected: {data['apiConnected']}")
        for name, available in data["models"].items():
            print(f"  - {name}: {available}")
    return True


def main():
    config = get_config()

    parser = argparse.ArgumentParser(
        description="Prompt-to-video generation service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Start the API server
    python main.py server --port 5000

    # Generate a video with the demo provider
    python main.py generate --prompt "Sunrise over a misty mountain lake"

    # Generate a 10 second Luma video
    python main.py generate --prompt "Neon city at night, slow dolly" --model luma --duration 10
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Server command
    server_parser = subparsers.add_parser("server", help="Start the HTTP API")
    server_parser.add_argument("--host", default=config.server.host, help="Host to bind")
    server_parser.add_argument("--port", type=int, default=config.server.port, help="Port to bind")
    server_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    # Generate command
    gen_parser = subparsers.add_parser("generate", help="Generate a video")
    gen_parser.add_argument("--prompt", "-p", required=True, help="Video description")
    gen_parser.add_argument("--duration", "-d", type=int, choices=[5, 10], default=5)
    gen_parser.add_argument(
        "--model",
        "-m",
        choices=["luma", "gemini", "heygen", "demo"],
        default="demo",
        help="Provider",
    )

    # Health command
    subparsers.add_parser("health", help="Show provider configuration")

    # Status command
    status_parser = subparsers.add_parser("status", help="Check a running server")
    status_parser.add_argument("job_id", nargs="?", help="Job id (omit for health)")
    status_parser.add_argument(
        "--server",
        default=f"http://localhost:{config.server.port}",
        help="Server URL",
    )

    args = parser.parse_args()
    setup_logging(config.server.log_level)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Run appropriate command
    if args.command == "server":
        start_server(host=args.host, port=args.port, reload=args.reload)

    elif args.command == "generate":
        ok = asyncio.run(generate_video(args.prompt, args.duration, args.model))
        sys.exit(0 if ok else 1)

    elif args.command == "health":
        show_health()

    elif args.command == "status":
        ok = asyncio.run(check_status(args.server, args.job_id))
        sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
