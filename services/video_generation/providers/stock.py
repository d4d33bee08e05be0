"""
Stock clip library used by the synchronous providers.

Clips are public sample videos; a prompt always maps to the same clip.
"""

import hashlib
from dataclasses import dataclass

SAMPLE_BASE = "https://commondatastorage.googleapis.com/gtv-videos-bucket/sample"


@dataclass(frozen=True)
class StockClip:
    name: str
    video_url: str
    thumbnail_url: str


STOCK_CLIPS = tuple(
    StockClip(
        name=name,
        video_url=f"{SAMPLE_BASE}/{name}.mp4",
        thumbnail_url=f"{SAMPLE_BASE}/images/{name}.jpg",
    )
    for name in (
        "ForBiggerBlazes",
        "ForBiggerEscapes",
        "ForBiggerFun",
        "ForBiggerJoyrides",
        "ForBiggerMeltdowns",
    )
)


def pick_stock_clip(prompt: str, duration_seconds: int) -> StockClip:
    """Deterministically choose a clip for a prompt/duration pair."""
    key = f"{prompt.strip().lower()}|{duration_seconds}".encode("utf-8")
    digest = hashlib.sha1(key).hexdigest()
    return STOCK_CLIPS[int(digest[:8], 16) % len(STOCK_CLIPS)]


def clip_id(prompt: str, duration_seconds: int) -> str:
    """Short stable identifier for a synthesized clip."""
    key = f"{prompt}|{duration_seconds}".encode("utf-8")
    return hashlib.sha1(key).hexdigest()[:12]
