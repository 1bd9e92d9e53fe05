"""
YouTube Client

URL handling for YouTube links plus the two remote lookups the pipeline
needs: video duration (YouTube Data API v3) and title/author (oEmbed).
Search is used to attach a concrete video to suggested follow-up topics.

All remote lookups degrade to None instead of raising: a missing duration
makes the pipeline assume a long video, a missing title falls back to a
generated one.
"""
import logging
import re
from dataclasses import dataclass
from typing import Optional

import httpx

from services.http_client import ResilientHTTPClient


logger = logging.getLogger(__name__)

YOUTUBE_API_BASE_URL = "https://www.googleapis.com/youtube/v3"
YOUTUBE_OEMBED_URL = "https://www.youtube.com/oembed"

VIDEO_ID_PATTERNS = [
    re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/)([^&\n?#]+)"),
    re.compile(r"youtube\.com/watch\?.*v=([^&\n?#]+)"),
]

ISO8601_DURATION_RE = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")


class InvalidYouTubeURLError(ValueError):
    """Raised when no video id can be extracted from a URL"""
    def __init__(self, url: str):
        super().__init__("Invalid YouTube URL")
        self.url = url


@dataclass
class VideoMetadata:
    title: str
    author_name: str = ""
    thumbnail_url: str = ""


def extract_video_id(url: str) -> Optional[str]:
    """Extract the video id from watch, short and embed URLs."""
    if not url:
        return None
    for pattern in VIDEO_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def is_valid_youtube_url(url: str) -> bool:
    return extract_video_id(url) is not None


def sanitize_youtube_url(url: str) -> str:
    """Reduce a YouTube URL to its canonical watch URL."""
    video_id = extract_video_id(url)
    if not video_id:
        logger.warning(f"[YOUTUBE] Could not extract video ID from URL: {url}")
        return url

    sanitized = f"https://www.youtube.com/watch?v={video_id}"
    if url != sanitized:
        logger.info(f"[YOUTUBE] URL sanitized: {url} -> {sanitized}")
    return sanitized


def parse_iso8601_duration(duration: str) -> int:
    """
    Parse an ISO 8601 duration (PT1H2M3S) to seconds.

    Missing components count as zero; unparseable input returns 0.
    """
    match = ISO8601_DURATION_RE.search(duration or "")
    if not match:
        return 0

    hours = int(match.group(1) or 0)
    minutes = int(match.group(2) or 0)
    seconds = int(match.group(3) or 0)
    return hours * 3600 + minutes * 60 + seconds


def generate_fallback_title(url: str) -> str:
    """Title used when oEmbed metadata is unavailable"""
    video_id = extract_video_id(url)
    if video_id:
        return f"YouTube Course ({video_id})"
    return "YouTube Course"


class YouTubeClient:
    """Async client for the YouTube Data API and oEmbed endpoint"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_client: Optional[ResilientHTTPClient] = None,
        oembed_client: Optional[ResilientHTTPClient] = None,
    ):
        self.api_key = api_key or ""
        self._api = api_client or ResilientHTTPClient(YOUTUBE_API_BASE_URL, timeout=15.0)
        self._oembed = oembed_client or ResilientHTTPClient(timeout=10.0)

    async def close(self):
        await self._api.close()
        await self._oembed.close()

    async def get_video_duration(self, video_id: str) -> Optional[int]:
        """Duration in seconds, or None when it cannot be determined."""
        if not self.api_key:
            logger.warning("[YOUTUBE] YOUTUBE_API_KEY not set, cannot determine video duration")
            return None

        try:
            response = await self._api.get(
                "/videos",
                params={"id": video_id, "part": "contentDetails", "key": self.api_key},
            )
        except httpx.HTTPError as e:
            logger.error(f"[YOUTUBE] Failed to fetch video duration: {e}")
            return None

        if not response.is_success:
            logger.error(f"[YOUTUBE] YouTube API error: {response.status_code}")
            return None

        try:
            items = response.json().get("items") or []
        except (ValueError, AttributeError) as e:
            logger.error(f"[YOUTUBE] Unreadable YouTube API response: {e}")
            return None
        if not items:
            logger.error(f"[YOUTUBE] Video not found: {video_id}")
            return None

        duration = parse_iso8601_duration(items[0].get("contentDetails", {}).get("duration", ""))
        logger.info(f"[YOUTUBE] Video duration: {duration // 60}m {duration % 60}s")
        return duration

    async def fetch_metadata(self, url: str) -> Optional[VideoMetadata]:
        """Title and author from oEmbed, or None on failure."""
        try:
            response = await self._oembed.get(YOUTUBE_OEMBED_URL, params={"url": url, "format": "json"})
        except httpx.HTTPError as e:
            logger.warning(f"[YOUTUBE] oEmbed request failed: {e}")
            return None

        if not response.is_success:
            logger.warning(f"[YOUTUBE] oEmbed returned {response.status_code} for {url}")
            return None

        try:
            payload = response.json()
            title = payload.get("title")
        except (ValueError, AttributeError) as e:
            logger.warning(f"[YOUTUBE] Unreadable oEmbed response for {url}: {e}")
            return None
        if not title:
            return None
        return VideoMetadata(
            title=title,
            author_name=payload.get("author_name", ""),
            thumbnail_url=payload.get("thumbnail_url", ""),
        )

    async def search_video(self, query: str) -> Optional[str]:
        """Watch URL of the top search result for a query."""
        if not self.api_key:
            return None

        try:
            data = await self._api.get_json(
                "/search",
                params={
                    "part": "snippet",
                    "type": "video",
                    "maxResults": 1,
                    "videoEmbeddable": "true",
                    "q": query,
                    "key": self.api_key,
                },
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"[YOUTUBE] Search failed for '{query}': {e}")
            return None

        items = data.get("items") if isinstance(data, dict) else None
        for item in items or []:
            video_id = (item.get("id") or {}).get("videoId") if isinstance(item, dict) else None
            if video_id:
                return f"https://www.youtube.com/watch?v={video_id}"
        return None
