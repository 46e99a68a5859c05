import logging

from mediapipeline.clients import PipelineClients
from mediapipeline.results import TranscodingStarted, Uploaded, UploadRejected, UploadResult

from .jobs import claim_completion, mark_failed, record_media_id, record_publish_outcome, send_status
from .models import VideoJob
from .publishing import get_linked_account, materialize_thread, publish_or_schedule

logger = logging.getLogger(__name__)

NOTHING_PUBLISHED = "No tweets were published"


def media_entry(job: VideoJob, clients: PipelineClients) -> dict:
    key = job.transcoded_storage_key or job.storage_key
    return {
        "s3Key": key,
        "media_id": job.platform_media_id,
        "url": clients.public_url(key),
        "type": "video",
    }


def finalize_job(job: VideoJob, clients: PipelineClients) -> bool:
    """Complete the job and run its publish action once.

    Only the caller that wins the processing -> completed update publishes.
    A publish failure is stored on the job, the status stays completed.
    """
    if not claim_completion(job):
        logger.info("job %s: not claimed for publishing (status %s)", job.pk, job.status)
        return False

    content = job.pending_content or {}
    if not content.get("tweets"):
        logger.info("job %s: no pending content to publish", job.pk)
        return True

    try:
        account = get_linked_account(job.user_id)
        tweet_id = materialize_thread(job, account, media_entry(job, clients))
        published = publish_or_schedule(job.thread_id, account, content, clients)
    except Exception as e:
        logger.exception("job %s: media is ready but publishing failed", job.pk)
        record_publish_outcome(job, error=str(e) or type(e).__name__)
        return True

    # An empty id list from posting now means every row was rejected
    if isinstance(published, list) and not published:
        logger.warning("job %s: media is ready but no tweet was published", job.pk)
        record_publish_outcome(job, error=NOTHING_PUBLISHED)
        return True

    record_publish_outcome(job, tweet_id=tweet_id)
    return True


def apply_upload_result(job: VideoJob, result: UploadResult, clients: PipelineClients,
                        transcoded_key: str = None) -> str:
    if isinstance(result, Uploaded):
        extra = {"transcoded_storage_key": transcoded_key} if transcoded_key else {}
        if not record_media_id(job, result.media_id, **extra):
            logger.info("job %s: media id already recorded (status %s)", job.pk, job.status)
            return "superseded"
        finalize_job(job, clients)
        return "completed"
    if isinstance(result, TranscodingStarted):
        send_status(job.pk, job.status, transcoding=True)
        return "transcoding"
    if isinstance(result, UploadRejected):
        mark_failed(job, result.reason)
        return "failed"
    raise TypeError(f"unexpected upload result {result!r}")
