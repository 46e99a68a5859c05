from django.contrib import admin
from .models import SocialAccount, TranscodingUsage, Tweet, VideoJob


@admin.register(VideoJob)
class VideoJobAdmin(admin.ModelAdmin):
    # Status and failure reason at a glance
    list_display = ('id', 'created_at', 'user_id', 'platform', 'status', 'retry_count', 'error_message')
    list_filter = ('status', 'platform')
    search_fields = ('id', 'user_id', 'video_url', 'external_run_id')
    readonly_fields = ('created_at', 'updated_at', 'completed_at')


@admin.register(Tweet)
class TweetAdmin(admin.ModelAdmin):
    list_display = ('thread_id', 'position', 'is_scheduled', 'scheduled_for', 'is_published')
    list_filter = ('is_published', 'is_scheduled')


admin.site.register(SocialAccount)
admin.site.register(TranscodingUsage)
