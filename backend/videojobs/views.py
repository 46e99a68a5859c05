import logging

from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from .apps import get_clients
from .jobs import cleanup_stuck_jobs
from .models import VideoJob
from .serializers import (
    CleanupSerializer,
    ContentSubmitSerializer,
    VideoJobCreateSerializer,
    VideoJobSerializer,
)
from .submit import create_job_for_content, create_video_job
from .webhooks import handle_transcode_webhook

logger = logging.getLogger(__name__)

ENQUEUE_FAILED = "Failed to enqueue video processing job. Please try again."


class VideoJobViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = VideoJobSerializer

    def get_queryset(self):
        qs = VideoJob.objects.order_by("-created_at")
        user_id = self.request.query_params.get("user_id")
        if user_id:
            qs = qs.filter(user_id=user_id)
        wanted = self.request.query_params.get("status")
        if wanted:
            if wanted not in VideoJob.Status.values:
                return qs.none()
            qs = qs.filter(status=wanted)
        return qs

    def _enqueue(self, creator, **kwargs):
        try:
            return creator(**kwargs), None
        except Exception:
            logger.exception("could not create video job")
            return None, Response({"detail": ENQUEUE_FAILED}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    def create(self, request, *args, **kwargs):
        serializer = VideoJobCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        job, error = self._enqueue(
            create_video_job,
            user_id=data["user_id"],
            video_url=data["video_url"],
            pending_content=data.get("pending_content"),
            thread_id=data.get("thread_id"),
            tweet_id=data.get("tweet_id", ""),
        )
        if error:
            return error
        return Response(VideoJobSerializer(job).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"], url_path="from-content")
    def from_content(self, request):
        serializer = ContentSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        job, error = self._enqueue(
            create_job_for_content,
            user_id=data["user_id"],
            content=data["content"],
            pending_content=data.get("pending_content"),
            thread_id=data.get("thread_id"),
            tweet_id=data.get("tweet_id", ""),
        )
        if error:
            return error
        if job is None:
            return Response({"detail": "no video link found", "job": None}, status=status.HTTP_200_OK)
        return Response(VideoJobSerializer(job).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"])
    def cleanup(self, request):
        serializer = CleanupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        cleaned = cleanup_stuck_jobs(data["older_than_minutes"], user_id=data.get("user_id"))
        return Response({"cleanedUp": cleaned})


class TranscodeWebhookView(APIView):
    authentication_classes = []
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        code, payload = handle_transcode_webhook(request.data, get_clients())
        return Response(payload, status=code)
