from django.apps import AppConfig, apps


class VideoJobsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "videojobs"
    verbose_name = "Video jobs"

    clients = None

    def ready(self):
        self.clients = build_clients()


def build_clients():
    import requests
    from django.conf import settings
    from django.core.files.storage import default_storage

    from mediapipeline.apify import ApifyClient
    from mediapipeline.clients import PipelineClients
    from mediapipeline.coconut import CoconutClient
    from mediapipeline.screening import TranscodingLimits
    from mediapipeline.twitter import TwitterClientFactory

    session = requests.Session()
    return PipelineClients(
        downloader=ApifyClient(
            token=settings.APIFY_API_TOKEN,
            actor_id=settings.APIFY_ACTOR_ID,
            base_url=settings.APIFY_BASE_URL,
            session=session,
            timeout=settings.HTTP_TIMEOUT,
        ),
        transcoder=CoconutClient(
            api_key=settings.COCONUT_API_KEY,
            base_url=settings.COCONUT_BASE_URL,
            session=session,
            timeout=settings.HTTP_TIMEOUT,
        ),
        twitter=TwitterClientFactory(settings.TWITTER_CONSUMER_KEY, settings.TWITTER_CONSUMER_SECRET),
        storage=default_storage,
        http=session,
        limits=TranscodingLimits.from_settings(settings.VIDEO_PIPELINE),
        webhook_url=settings.TRANSCODE_WEBHOOK_URL,
        media_base_url=settings.MEDIA_PUBLIC_BASE_URL,
        bucket_name=settings.MEDIA_BUCKET_NAME,
        http_timeout=settings.HTTP_TIMEOUT,
    )


def get_clients():
    return apps.get_app_config("videojobs").clients
