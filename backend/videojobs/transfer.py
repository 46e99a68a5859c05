import logging
from typing import Optional

import requests
from django.conf import settings
from django.core.files.base import ContentFile
from django.utils.crypto import get_random_string

from mediapipeline.clients import PipelineClients
from mediapipeline.errors import MediaTransferError

from .jobs import record_storage_key
from .models import VideoJob

logger = logging.getLogger(__name__)


def build_storage_key(category: str, user_id: str, ext: str = "mp4") -> str:
    return f"{category}/{user_id}/{get_random_string(21)}.{ext}"


def fetch_media(media_url: str, clients: PipelineClients) -> bytes:
    try:
        resp = clients.http.get(media_url, timeout=clients.http_timeout)
    except requests.RequestException as e:
        raise MediaTransferError(f"Failed to download video file: {e}") from e
    if not resp.ok:
        raise MediaTransferError(f"Failed to download video file (HTTP {resp.status_code})")
    if not resp.content:
        raise MediaTransferError("Downloaded video file is empty")
    return resp.content


def store_media(data: bytes, key: str, clients: PipelineClients) -> str:
    try:
        return clients.storage.save(key, ContentFile(data))
    except Exception as e:
        raise MediaTransferError(f"Failed to store video: {e}") from e


def transfer_media(job: VideoJob, media_url: str, clients: PipelineClients) -> Optional[bytes]:
    """Copy the resolved media into storage and record its key on the job.

    The key is written only after the storage backend accepted the bytes.
    Returns the bytes so the upload stage does not read them back, or None
    when another delivery already stored media for this job.
    """
    logger.info("job %s: downloading %s", job.pk, media_url)
    data = fetch_media(media_url, clients)

    key = build_storage_key(settings.VIDEO_PIPELINE["STORAGE_CATEGORY"], job.user_id)
    saved_key = store_media(data, key, clients)
    logger.info("job %s: stored %d bytes at %s", job.pk, len(data), saved_key)

    if not record_storage_key(job, saved_key):
        logger.info("job %s: media already stored by another delivery, dropping %s", job.pk, saved_key)
        clients.storage.delete(saved_key)
        return None
    return data
