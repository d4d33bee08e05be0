"""
Video Generation Services

- video_generation: job store, provider adapters, poll scheduler, orchestrator
- api: FastAPI surface over the orchestrator
"""
