from rest_framework import serializers

from mediapipeline.platforms import is_video_url

from .models import VideoJob
from .publishing import PublishAction


class VideoJobSerializer(serializers.ModelSerializer):
    outcome = serializers.CharField(read_only=True)
    platform_label = serializers.SerializerMethodField()

    class Meta:
        model = VideoJob
        fields = [
            "id", "user_id", "thread_id", "tweet_id", "video_url", "platform", "platform_label",
            "status", "outcome", "storage_key", "transcoded_storage_key", "platform_media_id",
            "error_message", "retry_count", "publish_error", "video_metadata",
            "created_at", "updated_at", "completed_at", "published_at",
        ]
        read_only_fields = fields

    def get_platform_label(self, obj):
        return obj.platform_tag.label


class PendingTweetSerializer(serializers.Serializer):
    content = serializers.CharField(allow_blank=True)
    media = serializers.ListField(child=serializers.DictField(), required=False, default=list)
    delayMs = serializers.IntegerField(min_value=0, required=False)


class PendingContentSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=[a.value for a in PublishAction], default=PublishAction.POST_NOW.value)
    tweets = PendingTweetSerializer(many=True)
    timezone = serializers.CharField(required=False)
    userNow = serializers.CharField(required=False)
    scheduledUnix = serializers.IntegerField(required=False, min_value=0)
    scheduledTime = serializers.DateTimeField(required=False)

    def validate(self, attrs):
        if attrs["action"] == PublishAction.SCHEDULE.value and not (
            attrs.get("scheduledUnix") or attrs.get("scheduledTime")
        ):
            raise serializers.ValidationError("schedule_thread needs scheduledUnix or scheduledTime")
        if attrs.get("scheduledTime"):
            attrs["scheduledTime"] = attrs["scheduledTime"].isoformat()
        return attrs


class VideoJobCreateSerializer(serializers.Serializer):
    user_id = serializers.CharField(max_length=64)
    video_url = serializers.URLField(max_length=1024)
    thread_id = serializers.CharField(max_length=64, required=False)
    tweet_id = serializers.CharField(max_length=64, required=False, allow_blank=True)
    pending_content = PendingContentSerializer(required=False)

    def validate_video_url(self, value):
        if not is_video_url(value):
            raise serializers.ValidationError(
                "Unsupported URL. Please provide a valid Instagram, TikTok, Twitter/X, or YouTube link."
            )
        return value


class ContentSubmitSerializer(serializers.Serializer):
    user_id = serializers.CharField(max_length=64)
    content = serializers.CharField()
    thread_id = serializers.CharField(max_length=64, required=False)
    tweet_id = serializers.CharField(max_length=64, required=False, allow_blank=True)
    pending_content = PendingContentSerializer(required=False)


class CleanupSerializer(serializers.Serializer):
    older_than_minutes = serializers.IntegerField(min_value=1, default=60)
    user_id = serializers.CharField(max_length=64, required=False)
