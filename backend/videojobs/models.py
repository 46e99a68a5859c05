import uuid

from django.db import models

from mediapipeline.platforms import Platform


class VideoJob(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending"
        PROCESSING = "processing"
        COMPLETED = "completed"
        FAILED = "failed"

    TERMINAL = (Status.COMPLETED, Status.FAILED)
    PLATFORMS = [(p.value, p.value) for p in Platform]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.CharField(max_length=64, db_index=True)
    thread_id = models.CharField(max_length=64)
    tweet_id = models.CharField(max_length=64, blank=True, default="")
    video_url = models.URLField(max_length=1024)
    platform = models.CharField(max_length=16, choices=PLATFORMS, default=Platform.UNKNOWN.value)

    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING, db_index=True)

    external_run_id = models.CharField(max_length=128, null=True, blank=True)
    queue_message_id = models.CharField(max_length=128, null=True, blank=True)
    storage_key = models.CharField(max_length=512, null=True, blank=True)
    transcode_job_id = models.CharField(max_length=128, null=True, blank=True)
    transcoded_storage_key = models.CharField(max_length=512, null=True, blank=True)
    platform_media_id = models.CharField(max_length=128, null=True, blank=True)

    error_message = models.TextField(blank=True, default="")
    retry_count = models.PositiveIntegerField(default=0)

    video_metadata = models.JSONField(default=dict, blank=True)
    pending_content = models.JSONField(null=True, blank=True)

    publish_error = models.TextField(blank=True, default="")
    published_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL

    @property
    def platform_tag(self) -> Platform:
        return Platform(self.platform)

    @property
    def outcome(self):
        """Finer grained view of ``status`` for clients."""
        if self.status != self.Status.COMPLETED:
            return self.status
        if self.publish_error:
            return "completed_unpublished"
        return "completed"

    def __str__(self):
        return f"VideoJob #{self.id} ({self.status})"


class SocialAccount(models.Model):
    user_id = models.CharField(max_length=64, db_index=True)
    provider = models.CharField(max_length=32, default="twitter")
    username = models.CharField(max_length=64, blank=True, default="")
    access_token = models.TextField()
    access_secret = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"@{self.username} ({self.provider})"


class Tweet(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    thread_id = models.CharField(max_length=64, db_index=True)
    user_id = models.CharField(max_length=64)
    account = models.ForeignKey(SocialAccount, on_delete=models.CASCADE, related_name="tweets")
    content = models.TextField(blank=True, default="")
    media = models.JSONField(default=list, blank=True)
    position = models.PositiveIntegerField(default=0)
    is_thread_start = models.BooleanField(default=False)
    delay_ms = models.PositiveIntegerField(default=0)
    is_scheduled = models.BooleanField(default=False)
    scheduled_for = models.DateTimeField(null=True, blank=True)
    is_published = models.BooleanField(default=False)
    twitter_id = models.CharField(max_length=64, null=True, blank=True)
    reply_to_tweet_id = models.CharField(max_length=64, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["thread_id", "position"]

    def __str__(self):
        return f"Tweet {self.position} of {self.thread_id}"


class TranscodingUsage(models.Model):
    user_id = models.CharField(max_length=64, db_index=True)
    video_job = models.ForeignKey(VideoJob, null=True, blank=True, on_delete=models.SET_NULL)
    file_size_mb = models.FloatField()
    estimated_minutes = models.FloatField()
    estimated_cost = models.FloatField()
    created_at = models.DateTimeField(auto_now_add=True)
