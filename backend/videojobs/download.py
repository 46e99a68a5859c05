import logging

from django.conf import settings

from mediapipeline.apify import ApifyClient
from mediapipeline.backoff import next_poll_delay
from mediapipeline.results import DownloadFailed, DownloadPending, DownloadResolved, DownloadResult

from .jobs import record_run_id
from .models import VideoJob

logger = logging.getLogger(__name__)


def poll_schedule(attempt: int):
    conf = settings.VIDEO_PIPELINE
    return next_poll_delay(
        attempt,
        max_attempts=conf["MAX_POLL_ATTEMPTS"],
        base=conf["POLL_BASE_DELAY"],
        step=conf["POLL_DELAY_STEP"],
        cap=conf["POLL_MAX_DELAY"],
    )


def start_or_resume(job: VideoJob, downloader: ApifyClient) -> str:
    """Return the job's external run id, submitting a run only if none is stored."""
    if job.external_run_id:
        logger.info("job %s: resuming download run %s", job.pk, job.external_run_id)
        return job.external_run_id

    run_id = downloader.start_run(job.video_url, settings.VIDEO_PIPELINE["DOWNLOAD_QUALITY"])
    if not record_run_id(job, run_id):
        logger.warning(
            "job %s: run %s not recorded, keeping %s", job.pk, run_id, job.external_run_id
        )
    return job.external_run_id or run_id


def extract_media(items) -> DownloadResult:
    if not items:
        return DownloadFailed("No video found at the provided URL")

    video = items[0]
    media_url = video.get("mediaUrl") or video.get("video_url")
    if not media_url:
        return DownloadFailed("Could not extract video URL from the response")

    metadata = {
        "duration": video.get("duration") or video.get("durationSeconds"),
        "width": video.get("width"),
        "height": video.get("height"),
        "title": video.get("title"),
        "platform": video.get("platform"),
    }
    return DownloadResolved(media_url=media_url, metadata={k: v for k, v in metadata.items() if v is not None})


def poll_once(job: VideoJob, downloader: ApifyClient, attempt: int) -> DownloadResult:
    run = downloader.get_run(job.external_run_id)
    logger.info("job %s: run %s status %s (attempt %d)", job.pk, job.external_run_id, run.status, attempt)

    if run.succeeded:
        if not run.dataset_id:
            return DownloadFailed("Download run finished without a result dataset")
        return extract_media(downloader.get_dataset_items(run.dataset_id))

    if run.failed:
        return DownloadFailed(f"Video download {run.status.lower()}")

    delay = poll_schedule(attempt)
    if delay is None:
        return DownloadFailed(f"Video download timed out after {attempt + 1} polling attempts")
    return DownloadPending(delay_seconds=delay)
