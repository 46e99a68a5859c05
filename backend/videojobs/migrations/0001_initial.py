import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="SocialAccount",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("user_id", models.CharField(db_index=True, max_length=64)),
                ("provider", models.CharField(default="twitter", max_length=32)),
                ("username", models.CharField(blank=True, default="", max_length=64)),
                ("access_token", models.TextField()),
                ("access_secret", models.TextField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name="VideoJob",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("user_id", models.CharField(db_index=True, max_length=64)),
                ("thread_id", models.CharField(max_length=64)),
                ("tweet_id", models.CharField(blank=True, default="", max_length=64)),
                ("video_url", models.URLField(max_length=1024)),
                (
                    "platform",
                    models.CharField(
                        choices=[
                            ("instagram", "instagram"),
                            ("tiktok", "tiktok"),
                            ("youtube", "youtube"),
                            ("twitter", "twitter"),
                            ("unknown", "unknown"),
                        ],
                        default="unknown",
                        max_length=16,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("processing", "Processing"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("external_run_id", models.CharField(blank=True, max_length=128, null=True)),
                ("queue_message_id", models.CharField(blank=True, max_length=128, null=True)),
                ("storage_key", models.CharField(blank=True, max_length=512, null=True)),
                ("transcode_job_id", models.CharField(blank=True, max_length=128, null=True)),
                ("transcoded_storage_key", models.CharField(blank=True, max_length=512, null=True)),
                ("platform_media_id", models.CharField(blank=True, max_length=128, null=True)),
                ("error_message", models.TextField(blank=True, default="")),
                ("retry_count", models.PositiveIntegerField(default=0)),
                ("video_metadata", models.JSONField(blank=True, default=dict)),
                ("pending_content", models.JSONField(blank=True, null=True)),
                ("publish_error", models.TextField(blank=True, default="")),
                ("published_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.CreateModel(
            name="Tweet",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("thread_id", models.CharField(db_index=True, max_length=64)),
                ("user_id", models.CharField(max_length=64)),
                ("content", models.TextField(blank=True, default="")),
                ("media", models.JSONField(blank=True, default=list)),
                ("position", models.PositiveIntegerField(default=0)),
                ("is_thread_start", models.BooleanField(default=False)),
                ("delay_ms", models.PositiveIntegerField(default=0)),
                ("is_scheduled", models.BooleanField(default=False)),
                ("scheduled_for", models.DateTimeField(blank=True, null=True)),
                ("is_published", models.BooleanField(default=False)),
                ("twitter_id", models.CharField(blank=True, max_length=64, null=True)),
                ("reply_to_tweet_id", models.CharField(blank=True, max_length=64, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tweets",
                        to="videojobs.socialaccount",
                    ),
                ),
            ],
            options={"ordering": ["thread_id", "position"]},
        ),
        migrations.CreateModel(
            name="TranscodingUsage",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("user_id", models.CharField(db_index=True, max_length=64)),
                ("file_size_mb", models.FloatField()),
                ("estimated_minutes", models.FloatField()),
                ("estimated_cost", models.FloatField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "video_job",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        to="videojobs.videojob",
                    ),
                ),
            ],
        ),
    ]
