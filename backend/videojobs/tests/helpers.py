from unittest.mock import MagicMock

from django.core.files.storage import FileSystemStorage

from mediapipeline.apify import RunStatus
from mediapipeline.clients import PipelineClients
from mediapipeline.screening import TranscodingLimits
from videojobs.models import SocialAccount, VideoJob

TIKTOK_URL = "https://www.tiktok.com/@user/video/12345"
MEDIA_URL = "https://x/video.mp4"


def make_clients(media_root, limits=None):
    downloader = MagicMock()
    downloader.start_run.return_value = "run-1"
    downloader.get_run.return_value = RunStatus("SUCCEEDED", "ds-1")
    downloader.get_dataset_items.return_value = [{"mediaUrl": MEDIA_URL, "duration": 12}]

    http = MagicMock()
    http.get.return_value = MagicMock(ok=True, status_code=200, content=b"fake-video-bytes")

    transcoder = MagicMock()
    transcoder.create_job.return_value = "tc-1"

    account_client = MagicMock()
    account_client.upload_media.return_value = "media-1"
    account_client.create_tweet.return_value = "tw-1"
    twitter = MagicMock()
    twitter.for_account.return_value = account_client

    return PipelineClients(
        downloader=downloader,
        transcoder=transcoder,
        twitter=twitter,
        storage=FileSystemStorage(location=media_root, base_url="/media/"),
        http=http,
        limits=limits or TranscodingLimits(),
        webhook_url="https://app.test/api/video/transcode-webhook/",
        media_base_url="https://app.test",
    )


def make_account(user_id="user-1"):
    return SocialAccount.objects.create(
        user_id=user_id, provider="twitter", username="poster",
        access_token="token", access_secret="secret",
    )


def make_job(status=VideoJob.Status.PENDING, **kwargs):
    fields = {
        "user_id": "user-1",
        "thread_id": "thread-1",
        "video_url": TIKTOK_URL,
        "platform": "tiktok",
        "status": status,
        "pending_content": {
            "action": "post_thread_now",
            "tweets": [{"content": f"look at this {TIKTOK_URL}", "media": []}],
        },
    }
    fields.update(kwargs)
    return VideoJob.objects.create(**fields)
