"""Post rows and the publish-or-schedule action of the surrounding app."""

import logging
import time
from datetime import datetime, timedelta, timezone as dt_timezone
from enum import Enum

import tweepy
from django.utils import timezone

from mediapipeline.clients import PipelineClients
from mediapipeline.errors import NoLinkedAccountError

from .models import SocialAccount, Tweet, VideoJob

logger = logging.getLogger(__name__)


class PublishAction(str, Enum):
    POST_NOW = "post_thread_now"
    QUEUE = "queue_thread"
    SCHEDULE = "schedule_thread"


def get_linked_account(user_id: str, provider: str = "twitter") -> SocialAccount:
    account = (
        SocialAccount.objects.filter(user_id=user_id, provider=provider)
        .order_by("created_at")
        .first()
    )
    if account is None or not account.access_token or not account.access_secret:
        raise NoLinkedAccountError("No Twitter account connected")
    return account


def video_tweet_index(tweets, video_url: str) -> int:
    for index, tweet in enumerate(tweets):
        if video_url in (tweet.get("content") or ""):
            return index
    return 0


def materialize_thread(job: VideoJob, account: SocialAccount, media_entry: dict) -> str:
    """Create the job thread's Tweet rows with the video attached.

    Returns the id of the row carrying the video.
    """
    tweets = (job.pending_content or {}).get("tweets") or []
    target = video_tweet_index(tweets, job.video_url)
    thread_id = job.thread_id

    rows = []
    for index, tweet in enumerate(tweets):
        media = list(tweet.get("media") or [])
        if index == target:
            media.append(media_entry)
        rows.append(Tweet(
            thread_id=thread_id,
            user_id=job.user_id,
            account=account,
            content=tweet.get("content") or "",
            media=media,
            position=index,
            is_thread_start=index == 0,
            delay_ms=tweet.get("delayMs", 1000 if index > 0 else 0),
        ))
    Tweet.objects.bulk_create(rows)
    logger.info("job %s: created %d tweets in thread %s", job.pk, len(rows), thread_id)
    return str(rows[target].pk)


def next_queue_slot(account: SocialAccount, now=None):
    """First free top-of-hour slot after ``now`` for the account."""
    now = now or timezone.now()
    occupied = set(
        Tweet.objects.filter(account=account, is_scheduled=True, is_thread_start=True)
        .exclude(scheduled_for=None)
        .values_list("scheduled_for", flat=True)
    )
    slot = now.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)
    while slot in occupied:
        slot += timedelta(hours=1)
    return slot


def resolve_schedule_time(content: dict, account: SocialAccount):
    unix = content.get("scheduledUnix")
    if unix:
        # milliseconds from some clients, seconds from others
        if unix > 10 ** 11:
            unix = unix / 1000
        return datetime.fromtimestamp(unix, tz=dt_timezone.utc)
    if content.get("scheduledTime"):
        parsed = datetime.fromisoformat(content["scheduledTime"].replace("Z", "+00:00"))
        if timezone.is_naive(parsed):
            parsed = timezone.make_aware(parsed, dt_timezone.utc)
        return parsed
    return next_queue_slot(account)


def publish_thread(thread_id: str, clients: PipelineClients) -> list:
    rows = list(Tweet.objects.filter(thread_id=thread_id, is_published=False).order_by("position"))
    if not rows:
        logger.info("no unpublished tweets in thread %s", thread_id)
        return []

    account = rows[0].account
    client = clients.twitter.for_account(account.access_token, account.access_secret)

    published = []
    previous_id = None
    for index, row in enumerate(rows):
        if index > 0 and row.delay_ms:
            time.sleep(row.delay_ms / 1000)

        media_ids = [
            m["media_id"] for m in row.media
            if isinstance(m.get("media_id"), str) and m["media_id"].strip()
        ]
        try:
            tweet_id = client.create_tweet(row.content, media_ids, in_reply_to=previous_id)
        except tweepy.BadRequest as e:
            logger.warning("tweet %s rejected, leaving it unpublished: %s", row.pk, e)
            row.is_scheduled = False
            row.is_published = False
            row.save(update_fields=["is_scheduled", "is_published", "updated_at"])
            continue

        row.is_scheduled = False
        row.is_published = True
        row.twitter_id = tweet_id
        row.reply_to_tweet_id = previous_id
        row.save(update_fields=["is_scheduled", "is_published", "twitter_id", "reply_to_tweet_id", "updated_at"])
        published.append(tweet_id)
        previous_id = tweet_id

    logger.info("published %d/%d tweets of thread %s", len(published), len(rows), thread_id)
    return published


def publish_or_schedule(thread_id: str, account: SocialAccount, content: dict, clients: PipelineClients):
    action = PublishAction(content.get("action") or PublishAction.POST_NOW.value)

    if action is PublishAction.POST_NOW:
        return publish_thread(thread_id, clients)

    if action is PublishAction.SCHEDULE or action is PublishAction.QUEUE:
        from .tasks import publish_scheduled_thread

        when = resolve_schedule_time(content, account)
        Tweet.objects.filter(thread_id=thread_id).update(is_scheduled=True, scheduled_for=when)
        publish_scheduled_thread.apply_async((thread_id,), eta=when)
        logger.info("thread %s scheduled for %s (%s)", thread_id, when.isoformat(), action.value)
        return when

    raise ValueError(f"unhandled publish action {action!r}")
