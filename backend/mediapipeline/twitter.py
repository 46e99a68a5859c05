import io
import logging
from typing import List, Optional

import tweepy

from .errors import MediaFormatError, MediaUploadError

logger = logging.getLogger(__name__)

FORMAT_ERROR_MARKERS = (
    "InvalidMedia",
    "Invalid or Unsupported media",
    "UnsupportedMedia",
)


def is_format_error(message: str) -> bool:
    lowered = message.lower()
    return any(marker.lower() in lowered for marker in FORMAT_ERROR_MARKERS)


def _error_text(exc: Exception) -> str:
    parts = [str(exc)]
    parts.extend(getattr(exc, "api_messages", None) or [])
    return " ".join(p for p in parts if p)


def _upload_error(text: str) -> MediaUploadError:
    if is_format_error(text):
        return MediaFormatError(text)
    return MediaUploadError(text)


class TwitterClient:
    """Upload and publish on behalf of one linked account."""

    def __init__(self, consumer_key: str, consumer_secret: str,
                 access_token: str, access_secret: str):
        auth = tweepy.OAuth1UserHandler(consumer_key, consumer_secret, access_token, access_secret)
        self.api = tweepy.API(auth)
        self.client = tweepy.Client(
            consumer_key=consumer_key,
            consumer_secret=consumer_secret,
            access_token=access_token,
            access_token_secret=access_secret,
        )

    def upload_media(self, data: bytes, mime_type: str = "video/mp4") -> str:
        ext = mime_type.split("/")[-1]
        try:
            media = self.api.media_upload(
                filename=f"upload.{ext}",
                file=io.BytesIO(data),
                chunked=True,
                media_category="tweet_video",
            )
        except tweepy.TweepyException as e:
            raise _upload_error(_error_text(e)) from e

        # Async processing failures come back on the media object, not as an exception
        info = getattr(media, "processing_info", None) or {}
        if info.get("state") == "failed" or info.get("error"):
            error = info.get("error") or {}
            text = " ".join(str(p) for p in (error.get("name"), error.get("message")) if p)
            raise _upload_error(text or "Media processing failed")
        logger.info("uploaded %d bytes, media_id=%s", len(data), media.media_id_string)
        return media.media_id_string

    def create_tweet(self, text: str, media_ids: Optional[List[str]] = None,
                     in_reply_to: Optional[str] = None) -> str:
        resp = self.client.create_tweet(
            text=text,
            media_ids=media_ids or None,
            in_reply_to_tweet_id=in_reply_to,
        )
        return str(resp.data["id"])


class TwitterClientFactory:
    def __init__(self, consumer_key: str, consumer_secret: str):
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret

    def for_account(self, access_token: str, access_secret: str) -> TwitterClient:
        return TwitterClient(self.consumer_key, self.consumer_secret, access_token, access_secret)
