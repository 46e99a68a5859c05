import re
import logging
from enum import Enum

logger = logging.getLogger(__name__)


class Platform(str, Enum):
    INSTAGRAM = "instagram"
    TIKTOK = "tiktok"
    YOUTUBE = "youtube"
    TWITTER = "twitter"
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        if self is Platform.INSTAGRAM:
            return "Instagram"
        if self is Platform.TIKTOK:
            return "TikTok"
        if self is Platform.YOUTUBE:
            return "YouTube"
        if self is Platform.TWITTER:
            return "X/Twitter"
        if self is Platform.UNKNOWN:
            return "Unknown"
        raise ValueError(f"unhandled platform {self!r}")


URL_RE = re.compile(r"https?://[^\s]+")

# Tested independently, first match wins for each URL.
VIDEO_PATTERNS = [
    re.compile(r"(?:instagram\.com|instagr\.am)/(?:p|reel|tv)/"),
    re.compile(r"(?:tiktok\.com/@[\w.-]+/video/|vm\.tiktok\.com/)"),
    re.compile(r"(?:twitter\.com|x\.com)/\w+/status/"),
    re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/shorts/)"),
]


def is_video_url(url: str) -> bool:
    return any(pattern.search(url) for pattern in VIDEO_PATTERNS)


def extract_video_urls(content: str) -> list[str]:
    """Return the video links embedded in free text, in order of appearance.

    An empty list means there is nothing to download; it is not an error.
    """
    if not content:
        return []
    urls = URL_RE.findall(content)
    video_urls = [url for url in urls if is_video_url(url)]
    logger.debug("found %d urls, %d video urls", len(urls), len(video_urls))
    return video_urls


def get_platform_from_url(video_url: str) -> Platform:
    if "instagram" in video_url or "instagr.am" in video_url:
        return Platform.INSTAGRAM
    if "tiktok" in video_url:
        return Platform.TIKTOK
    if "youtube" in video_url or "youtu.be" in video_url:
        return Platform.YOUTUBE
    if "twitter" in video_url or "x.com" in video_url:
        return Platform.TWITTER
    return Platform.UNKNOWN
