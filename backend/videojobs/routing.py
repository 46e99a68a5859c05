from django.urls import path

from .consumers import VideoJobConsumer

websocket_urlpatterns = [
    path("ws/video-jobs/<str:job_id>/", VideoJobConsumer.as_asgi()),
]
