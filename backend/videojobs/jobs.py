"""Status-gated reads and writes of VideoJob rows.

Every write is a single UPDATE filtered on the current status, so two
deliveries racing on the same job cannot both move it forward.
"""

import logging
from datetime import timedelta

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.core.exceptions import ValidationError
from django.db.models import F
from django.utils import timezone

from .models import VideoJob

logger = logging.getLogger(__name__)

Status = VideoJob.Status
ACTIVE = (Status.PENDING, Status.PROCESSING)


def send_status(job_id, status, **extra):
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    async_to_sync(channel_layer.group_send)(
        f"video_job_{job_id}",
        {
            "type": "job_update",
            "data": {"job_id": str(job_id), "status": status, **extra},
        },
    )


def get_job(job_id):
    try:
        return VideoJob.objects.get(pk=job_id)
    except (VideoJob.DoesNotExist, ValidationError, ValueError):
        return None


def _update(job: VideoJob, allowed, extra_filter=None, **fields) -> bool:
    fields["updated_at"] = timezone.now()
    qs = VideoJob.objects.filter(pk=job.pk, status__in=allowed)
    if extra_filter:
        qs = qs.filter(**extra_filter)
    updated = qs.update(**fields) == 1
    job.refresh_from_db()
    return updated


def start_processing(job: VideoJob) -> bool:
    if not _update(job, [Status.PENDING], status=Status.PROCESSING):
        return False
    logger.info("job %s: pending -> processing", job.pk)
    send_status(job.pk, job.status)
    return True


def mark_failed(job: VideoJob, message: str) -> bool:
    updated = _update(
        job,
        ACTIVE,
        status=Status.FAILED,
        error_message=message,
        retry_count=F("retry_count") + 1,
    )
    if updated:
        logger.warning("job %s failed: %s", job.pk, message)
        send_status(job.pk, job.status, error=message)
    else:
        logger.info("job %s already %s, not failing it again", job.pk, job.status)
    return updated


def claim_completion(job: VideoJob) -> bool:
    """processing -> completed, only for a job whose media has been uploaded."""
    updated = _update(
        job,
        [Status.PROCESSING],
        extra_filter={"platform_media_id__isnull": False},
        status=Status.COMPLETED,
        completed_at=timezone.now(),
    )
    if updated:
        logger.info("job %s: processing -> completed", job.pk)
        send_status(job.pk, job.status, platform_media_id=job.platform_media_id)
    return updated


def record_run_id(job: VideoJob, run_id: str) -> bool:
    return _update(
        job,
        [Status.PROCESSING],
        extra_filter={"external_run_id__isnull": True},
        external_run_id=run_id,
    )


def record_storage_key(job: VideoJob, key: str) -> bool:
    return _update(job, [Status.PROCESSING], extra_filter={"storage_key__isnull": True}, storage_key=key)


def record_media_id(job: VideoJob, media_id: str, **fields) -> bool:
    return _update(
        job,
        [Status.PROCESSING],
        extra_filter={"platform_media_id__isnull": True},
        platform_media_id=media_id,
        **fields,
    )


def record(job: VideoJob, **fields) -> bool:
    """Write progress fields while the job is still processing."""
    return _update(job, [Status.PROCESSING], **fields)


def record_publish_outcome(job: VideoJob, error: str = "", tweet_id: str = "") -> None:
    fields = {"publish_error": error, "updated_at": timezone.now()}
    if tweet_id:
        fields["tweet_id"] = tweet_id
    if not error:
        fields["published_at"] = timezone.now()
    VideoJob.objects.filter(pk=job.pk, status=Status.COMPLETED).update(**fields)
    job.refresh_from_db()


def cleanup_stuck_jobs(older_than_minutes: int = 60, user_id=None) -> int:
    cutoff = timezone.now() - timedelta(minutes=older_than_minutes)
    stuck = VideoJob.objects.filter(status=Status.PROCESSING, updated_at__lt=cutoff)
    if user_id:
        stuck = stuck.filter(user_id=user_id)

    cleaned = 0
    for job in stuck:
        if mark_failed(job, "Job timed out - cleaned up automatically"):
            cleaned += 1
    logger.info("cleaned up %d stuck video jobs", cleaned)
    return cleaned
