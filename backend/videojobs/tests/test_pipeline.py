"""
test_direct_upload_completes_job:
Action: Poll a job whose download run succeeded and whose upload is accepted.
Expect: completed, storage key and media id set, one publish.

test_redelivered_poll_is_noop:
Action: Deliver the same poll again after completion.
Expect: No new run, no upload, no second publish.

test_format_error_hands_off_to_transcoding / webhook:
Action: Upload rejects the format, then the transcode webhook reports success.
Expect: processing while waiting, completed after the callback, one publish.
"""

import shutil
import tempfile
from unittest.mock import MagicMock, patch

import tweepy

from django.core.files.base import ContentFile
from django.test import TestCase, override_settings

from mediapipeline.apify import RunStatus
from mediapipeline.errors import DownloadServiceError, MediaFormatError, MediaUploadError
from mediapipeline.screening import TranscodingLimits
from videojobs import publishing
from videojobs.download import start_or_resume
from videojobs.models import Tweet, TranscodingUsage, VideoJob
from videojobs.tasks import process_poll
from videojobs.webhooks import handle_transcode_webhook

from .helpers import MEDIA_URL, make_account, make_clients, make_job

MEDIA_ROOT = tempfile.mkdtemp()

Status = VideoJob.Status


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class PollingPipelineTests(TestCase):

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        self.clients = make_clients(MEDIA_ROOT)
        self.uploader = self.clients.twitter.for_account.return_value
        self.account = make_account()
        self.job = make_job()

        patcher = patch("videojobs.tasks.schedule_poll", return_value="msg-2")
        self.schedule_poll = patcher.start()
        self.addCleanup(patcher.stop)

    def poll(self, attempt=0):
        return process_poll(str(self.job.pk), attempt, self.clients)

    def test_direct_upload_completes_job(self):
        with patch("videojobs.finalize.publish_or_schedule", wraps=publishing.publish_or_schedule) as publish:
            outcome = self.poll()

        self.assertEqual(outcome, "completed")
        self.job.refresh_from_db()
        self.assertEqual(self.job.status, Status.COMPLETED)
        self.assertEqual(self.job.external_run_id, "run-1")
        self.assertTrue(self.job.storage_key.startswith("tweet-media/user-1/"))
        self.assertTrue(self.clients.storage.exists(self.job.storage_key))
        self.assertEqual(self.job.platform_media_id, "media-1")
        self.assertIsNotNone(self.job.completed_at)
        self.assertEqual(self.job.video_metadata["duration"], 12)
        self.assertEqual(self.job.outcome, "completed")

        publish.assert_called_once()
        self.clients.http.get.assert_called_once_with(MEDIA_URL, timeout=self.clients.http_timeout)
        self.uploader.upload_media.assert_called_once_with(b"fake-video-bytes", "video/mp4")
        self.uploader.create_tweet.assert_called_once()
        args, kwargs = self.uploader.create_tweet.call_args
        self.assertEqual(args[1], ["media-1"])
        self.assertIsNone(kwargs["in_reply_to"])

        tweet = Tweet.objects.get(thread_id="thread-1")
        self.assertTrue(tweet.is_published)
        self.assertEqual(tweet.twitter_id, "tw-1")
        self.assertEqual(tweet.media[-1]["media_id"], "media-1")
        self.assertEqual(tweet.media[-1]["type"], "video")
        self.assertEqual(self.job.tweet_id, str(tweet.pk))

    def test_redelivered_poll_is_noop(self):
        self.poll()
        self.poll()
        self.poll(attempt=3)

        self.clients.downloader.start_run.assert_called_once()
        self.uploader.upload_media.assert_called_once()
        self.uploader.create_tweet.assert_called_once()
        self.assertEqual(Tweet.objects.count(), 1)

    def test_still_running_requeues_with_backoff(self):
        self.clients.downloader.get_run.return_value = RunStatus("RUNNING")

        outcome = self.poll(attempt=0)

        self.assertEqual(outcome, "requeued in 10s")
        self.schedule_poll.assert_called_once_with(self.job.pk, 1, 10)
        self.job.refresh_from_db()
        self.assertEqual(self.job.status, Status.PROCESSING)
        self.assertEqual(self.job.queue_message_id, "msg-2")

        self.poll(attempt=1)
        self.schedule_poll.assert_called_with(self.job.pk, 2, 12)
        # the stored run is reused
        self.clients.downloader.start_run.assert_called_once()

    def test_exhausted_attempts_fail_with_timeout(self):
        self.clients.downloader.get_run.return_value = RunStatus("RUNNING")

        self.poll(attempt=89)

        self.job.refresh_from_db()
        self.assertEqual(self.job.status, Status.FAILED)
        self.assertIn("timed out", self.job.error_message)
        self.assertIsNone(self.job.platform_media_id)
        self.assertEqual(self.job.retry_count, 1)
        self.schedule_poll.assert_not_called()

    def test_run_failure_is_fatal(self):
        self.clients.downloader.get_run.return_value = RunStatus("ABORTED")

        self.poll()

        self.job.refresh_from_db()
        self.assertEqual(self.job.status, Status.FAILED)
        self.assertEqual(self.job.error_message, "Video download aborted")
        self.uploader.upload_media.assert_not_called()

    def test_alternate_result_field_names(self):
        self.clients.downloader.get_dataset_items.return_value = [
            {"video_url": MEDIA_URL, "durationSeconds": 7}
        ]

        self.poll()

        self.job.refresh_from_db()
        self.assertEqual(self.job.status, Status.COMPLETED)
        self.assertEqual(self.job.video_metadata["duration"], 7)

    def test_missing_media_url_fails(self):
        self.clients.downloader.get_dataset_items.return_value = [{"title": "no link"}]

        self.poll()

        self.job.refresh_from_db()
        self.assertEqual(self.job.status, Status.FAILED)
        self.assertEqual(self.job.error_message, "Could not extract video URL from the response")
        self.assertIsNone(self.job.storage_key)

    def test_empty_dataset_fails(self):
        self.clients.downloader.get_dataset_items.return_value = []

        self.poll()

        self.job.refresh_from_db()
        self.assertEqual(self.job.error_message, "No video found at the provided URL")

    def test_download_http_failure_leaves_no_storage_key(self):
        self.clients.http.get.return_value.ok = False
        self.clients.http.get.return_value.status_code = 403

        self.poll()

        self.job.refresh_from_db()
        self.assertEqual(self.job.status, Status.FAILED)
        self.assertIn("HTTP 403", self.job.error_message)
        self.assertIsNone(self.job.storage_key)

    def test_status_check_error_fails_job(self):
        self.clients.downloader.get_run.side_effect = DownloadServiceError("Download service returned 500")

        self.poll()

        self.job.refresh_from_db()
        self.assertEqual(self.job.status, Status.FAILED)
        self.assertIn("500", self.job.error_message)

    def test_no_linked_account_fails_before_upload(self):
        self.account.delete()

        self.poll()

        self.job.refresh_from_db()
        self.assertEqual(self.job.status, Status.FAILED)
        self.assertEqual(self.job.error_message, "No Twitter account connected")
        self.uploader.upload_media.assert_not_called()

    def test_non_format_upload_error_fails_without_transcoding(self):
        self.uploader.upload_media.side_effect = MediaUploadError("rate limited")

        self.poll()

        self.job.refresh_from_db()
        self.assertEqual(self.job.status, Status.FAILED)
        self.assertEqual(self.job.error_message, "Upload failed: rate limited")
        self.clients.transcoder.create_job.assert_not_called()

    def test_screening_block_skips_upload(self):
        self.clients.limits = TranscodingLimits(max_file_size_mb=0.000001)

        self.poll()

        self.job.refresh_from_db()
        self.assertEqual(self.job.status, Status.FAILED)
        self.assertIn("Video too large", self.job.error_message)
        self.uploader.upload_media.assert_not_called()

    def test_publish_failure_keeps_job_completed(self):
        self.uploader.create_tweet.side_effect = RuntimeError("X is down")

        self.poll()

        self.job.refresh_from_db()
        self.assertEqual(self.job.status, Status.COMPLETED)
        self.assertEqual(self.job.platform_media_id, "media-1")
        self.assertEqual(self.job.publish_error, "X is down")
        self.assertEqual(self.job.outcome, "completed_unpublished")
        self.assertIsNone(self.job.published_at)

    def test_every_tweet_rejected_marks_job_unpublished(self):
        self.uploader.create_tweet.side_effect = tweepy.BadRequest(
            MagicMock(status_code=400, reason="Bad Request"),
            response_json={"errors": [{"message": "duplicate content"}]},
        )

        self.assertEqual(self.poll(), "completed")

        self.job.refresh_from_db()
        self.assertEqual(self.job.status, Status.COMPLETED)
        self.assertEqual(self.job.publish_error, "No tweets were published")
        self.assertEqual(self.job.outcome, "completed_unpublished")
        self.assertIsNone(self.job.published_at)

    def test_short_instagram_link_is_downloaded(self):
        job = make_job(video_url="https://instagr.am/p/ABC123/", platform="instagram", thread_id="thread-ig")

        self.assertEqual(process_poll(str(job.pk), 0, self.clients), "completed")

        job.refresh_from_db()
        self.assertEqual(job.status, Status.COMPLETED)
        self.assertEqual(job.platform_media_id, "media-1")
        self.clients.downloader.start_run.assert_called_once_with("https://instagr.am/p/ABC123/", "high")

    def test_unknown_job_and_terminal_job(self):
        self.assertIn("not found", process_poll("00000000-0000-0000-0000-000000000000", 0, self.clients))
        self.assertIn("not found", process_poll("not-a-uuid", 0, self.clients))

        failed = make_job(status=Status.FAILED)
        self.assertIn("already failed", process_poll(str(failed.pk), 0, self.clients))
        self.clients.downloader.start_run.assert_not_called()

    def test_start_or_resume_submits_once(self):
        self.job.status = Status.PROCESSING
        self.job.save()

        first = start_or_resume(self.job, self.clients.downloader)
        again = start_or_resume(VideoJob.objects.get(pk=self.job.pk), self.clients.downloader)

        self.assertEqual(first, "run-1")
        self.assertEqual(again, "run-1")
        self.clients.downloader.start_run.assert_called_once_with(self.job.video_url, "high")


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class TranscodingPipelineTests(TestCase):

    def setUp(self):
        self.clients = make_clients(MEDIA_ROOT)
        self.uploader = self.clients.twitter.for_account.return_value
        self.uploader.upload_media.side_effect = [
            MediaFormatError("InvalidMedia: Invalid or Unsupported media"),
            "media-2",
        ]
        make_account()
        self.job = make_job()

        patcher = patch("videojobs.tasks.schedule_poll", return_value="msg-2")
        patcher.start()
        self.addCleanup(patcher.stop)

    def start_transcode(self):
        outcome = process_poll(str(self.job.pk), 0, self.clients)
        self.assertEqual(outcome, "transcoding")
        kwargs = self.clients.transcoder.create_job.call_args.kwargs
        output_key = kwargs["output_path"]
        self.clients.storage.save(output_key, ContentFile(b"transcoded-bytes"))
        return output_key

    def webhook_body(self, **overrides):
        body = {
            "id": "tc-1",
            "status": "completed",
            "outputs": [{"key": self.output_key}],
            "input": {"metadata": {"video_job_id": str(self.job.pk)}},
        }
        body.update(overrides)
        return body

    def test_format_error_hands_off_to_transcoding(self):
        self.output_key = self.start_transcode()

        self.job.refresh_from_db()
        self.assertEqual(self.job.status, Status.PROCESSING)
        self.assertIsNone(self.job.platform_media_id)
        self.assertEqual(self.job.transcode_job_id, "tc-1")
        self.assertEqual(TranscodingUsage.objects.filter(user_id="user-1").count(), 1)

        kwargs = self.clients.transcoder.create_job.call_args.kwargs
        self.assertEqual(kwargs["metadata"], {"video_job_id": str(self.job.pk)})
        self.assertEqual(kwargs["webhook_url"], self.clients.webhook_url)
        self.assertTrue(kwargs["source_url"].startswith("https://app.test/media/tweet-media/"))
        self.assertTrue(self.output_key.startswith("transcoded-videos/user-1/"))
        self.uploader.create_tweet.assert_not_called()

    def test_successful_webhook_completes_job_once(self):
        self.output_key = self.start_transcode()

        with patch("videojobs.finalize.publish_or_schedule", wraps=publishing.publish_or_schedule) as publish:
            code, payload = handle_transcode_webhook(self.webhook_body(), self.clients)
            again_code, again = handle_transcode_webhook(self.webhook_body(), self.clients)

        self.assertEqual(code, 200)
        self.assertTrue(payload["success"])
        self.assertEqual(payload["platformMediaId"], "media-2")
        self.assertEqual(again_code, 200)
        self.assertEqual(again["message"], "Job already completed")

        self.job.refresh_from_db()
        self.assertEqual(self.job.status, Status.COMPLETED)
        self.assertEqual(self.job.transcoded_storage_key, self.output_key)
        self.assertEqual(self.job.platform_media_id, "media-2")
        publish.assert_called_once()
        self.assertEqual(self.uploader.upload_media.call_count, 2)
        self.uploader.upload_media.assert_called_with(b"transcoded-bytes", "video/mp4")
        self.uploader.create_tweet.assert_called_once()

    def test_rejected_transcoded_upload_is_final(self):
        self.output_key = self.start_transcode()
        self.uploader.upload_media.side_effect = MediaFormatError("InvalidMedia")

        code, payload = handle_transcode_webhook(self.webhook_body(), self.clients)

        self.assertEqual(code, 200)
        self.assertFalse(payload["success"])
        self.job.refresh_from_db()
        self.assertEqual(self.job.status, Status.FAILED)
        self.assertEqual(self.clients.transcoder.create_job.call_count, 1)

    def test_failed_webhook_marks_job_failed(self):
        self.output_key = self.start_transcode()

        code, payload = handle_transcode_webhook(
            self.webhook_body(status="failed", outputs=[], errors=["bad input", "codec"]),
            self.clients,
        )

        self.assertEqual(code, 200)
        self.job.refresh_from_db()
        self.assertEqual(self.job.status, Status.FAILED)
        self.assertEqual(self.job.error_message, "Transcoding failed: bad input, codec")

    def test_progress_webhook_does_not_touch_job(self):
        self.output_key = self.start_transcode()
        before = VideoJob.objects.get(pk=self.job.pk).updated_at

        code, payload = handle_transcode_webhook(
            self.webhook_body(status="processing", outputs=[], progress="40%"), self.clients
        )

        self.assertEqual(code, 200)
        self.assertEqual(payload["progress"], "40%")
        job = VideoJob.objects.get(pk=self.job.pk)
        self.assertEqual(job.status, Status.PROCESSING)
        self.assertEqual(job.updated_at, before)

    def test_poll_redelivered_while_transcoding_does_nothing(self):
        self.output_key = self.start_transcode()

        outcome = process_poll(str(self.job.pk), 1, self.clients)

        self.assertIn("already transferred", outcome)
        self.assertEqual(self.uploader.upload_media.call_count, 1)
        self.clients.downloader.start_run.assert_called_once()
