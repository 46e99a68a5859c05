import logging
import uuid

from mediapipeline.platforms import extract_video_urls, get_platform_from_url

from .jobs import mark_failed, send_status
from .models import VideoJob
from .tasks import schedule_poll

logger = logging.getLogger(__name__)


def create_video_job(user_id, video_url, pending_content=None, thread_id=None, tweet_id=""):
    """Persist a pending job and enqueue its first poll."""
    job = VideoJob.objects.create(
        user_id=user_id,
        thread_id=thread_id or str(uuid.uuid4()),
        tweet_id=tweet_id or "",
        video_url=video_url,
        platform=get_platform_from_url(video_url).value,
        status=VideoJob.Status.PENDING,
        pending_content=pending_content,
    )
    logger.info("job %s: created for %s (%s)", job.pk, video_url, job.platform)

    try:
        message_id = schedule_poll(job.pk, 0)
    except Exception as e:
        mark_failed(job, f"Failed to enqueue job: {e}")
        raise

    VideoJob.objects.filter(pk=job.pk).update(queue_message_id=message_id)
    job.queue_message_id = message_id
    send_status(job.pk, job.status)
    return job


def create_job_for_content(user_id, content, pending_content=None, thread_id=None, tweet_id=""):
    """Start a job for the first video link in ``content``, or return None."""
    video_urls = extract_video_urls(content)
    if not video_urls:
        return None
    if len(video_urls) > 1:
        logger.info("content has %d video links, using the first", len(video_urls))
    return create_video_job(
        user_id,
        video_urls[0],
        pending_content=pending_content,
        thread_id=thread_id,
        tweet_id=tweet_id,
    )
