import logging

from celery import shared_task
from django.conf import settings

from mediapipeline.errors import PipelineError
from mediapipeline.results import DownloadFailed, DownloadPending, DownloadResolved

from .apps import get_clients
from .download import poll_once, start_or_resume
from .finalize import apply_upload_result
from .jobs import (
    cleanup_stuck_jobs,
    get_job,
    mark_failed,
    record,
    send_status,
    start_processing,
)
from .models import VideoJob
from .publishing import publish_thread
from .transfer import transfer_media
from .upload import upload_stored_media

logger = logging.getLogger(__name__)


def schedule_poll(job_id, attempt: int, delay: int = 0) -> str:
    result = poll_video_job.apply_async(
        args=(str(job_id), attempt),
        countdown=delay,
        retry=True,
        retry_policy={"max_retries": settings.VIDEO_PIPELINE["QUEUE_DELIVERY_RETRIES"]},
    )
    return result.id


def process_poll(job_id, attempt: int, clients) -> str:
    job = get_job(job_id)
    if job is None:
        logger.warning("poll for unknown video job %s", job_id)
        return f"Job {job_id} not found"

    # Duplicate or late deliveries end here
    if job.is_terminal:
        return f"Job {job_id} already {job.status}"
    if job.status == VideoJob.Status.PENDING and not start_processing(job):
        return f"Job {job_id} claimed elsewhere ({job.status})"
    if job.storage_key:
        return f"Job {job_id} media already transferred"

    try:
        start_or_resume(job, clients.downloader)
        result = poll_once(job, clients.downloader, attempt)

        if isinstance(result, DownloadPending):
            message_id = schedule_poll(job.pk, attempt + 1, result.delay_seconds)
            record(job, queue_message_id=message_id)
            send_status(job.pk, job.status, polling_attempt=attempt + 1)
            return f"requeued in {result.delay_seconds}s"

        if isinstance(result, DownloadFailed):
            mark_failed(job, result.reason)
            return "failed"

        if not isinstance(result, DownloadResolved):
            raise TypeError(f"unexpected download result {result!r}")

        record(job, video_metadata={**result.metadata, "platform": result.metadata.get("platform") or job.platform})
        data = transfer_media(job, result.media_url, clients)
        if data is None:
            return "superseded"

        return apply_upload_result(job, upload_stored_media(job, data, clients), clients)

    except PipelineError as e:
        mark_failed(job, str(e))
        return "failed"
    except Exception as e:
        logger.exception("job %s: unexpected error while polling", job_id)
        mark_failed(job, f"Unexpected error: {e}")
        return "failed"


@shared_task
def poll_video_job(video_job_id: str, polling_attempt: int = 0):
    return process_poll(video_job_id, polling_attempt, get_clients())


@shared_task
def publish_scheduled_thread(thread_id: str):
    return publish_thread(thread_id, get_clients())


@shared_task
def cleanup_stuck_jobs_task():
    return cleanup_stuck_jobs(settings.VIDEO_PIPELINE["STUCK_JOB_MINUTES"])
