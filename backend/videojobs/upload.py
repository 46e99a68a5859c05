import logging

from django.utils import timezone

from mediapipeline.clients import PipelineClients
from mediapipeline.errors import MediaFormatError, MediaUploadError, TranscodeServiceError
from mediapipeline.results import Uploaded, UploadRejected, UploadResult
from mediapipeline.screening import screen_upload

from .models import TranscodingUsage, VideoJob
from .publishing import get_linked_account
from .transcode import start_transcoding

logger = logging.getLogger(__name__)


def monthly_transcode_count(user_id: str) -> int:
    start_of_month = timezone.now().replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return TranscodingUsage.objects.filter(user_id=user_id, created_at__gte=start_of_month).count()


def upload_stored_media(job: VideoJob, data: bytes, clients: PipelineClients,
                        allow_transcoding: bool = True) -> UploadResult:
    """Try the original bytes once, fall back to transcoding on a format error.

    With ``allow_transcoding`` off (re-upload of a transcoded file) a
    rejection is final and screening is skipped.
    """
    account = get_linked_account(job.user_id)

    screening = None
    if allow_transcoding:
        screening = screen_upload(len(data), monthly_transcode_count(job.user_id), clients.limits)
        logger.info(
            "job %s: %.2f MB, ~%.1f min, est. $%.2f",
            job.pk, screening.file_size_mb, screening.estimated_minutes, screening.estimated_cost,
        )
        if not screening.allowed:
            return UploadRejected(screening.reason)

    uploader = clients.twitter.for_account(account.access_token, account.access_secret)
    try:
        media_id = uploader.upload_media(data, "video/mp4")
    except MediaFormatError as e:
        if not allow_transcoding:
            return UploadRejected(f"Platform rejected transcoded video: {e}")
        logger.info("job %s: format rejected (%s), transcoding", job.pk, e)
        try:
            return start_transcoding(job, clients, screening)
        except TranscodeServiceError as te:
            return UploadRejected(f"Transcoding failed: {te}")
    except MediaUploadError as e:
        return UploadRejected(f"Upload failed: {e}")

    logger.info("job %s: uploaded, media_id=%s", job.pk, media_id)
    return Uploaded(media_id)

