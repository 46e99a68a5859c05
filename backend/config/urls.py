from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static
from rest_framework.routers import DefaultRouter
from videojobs.views import VideoJobViewSet, TranscodeWebhookView

router = DefaultRouter()
router.register(r"video-jobs", VideoJobViewSet, basename="video-jobs")


urlpatterns = [
    path('admin/', admin.site.urls),
    path("api/", include(router.urls)),
    path("api/video/transcode-webhook/", TranscodeWebhookView.as_view(), name="transcode-webhook"),
] + static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
