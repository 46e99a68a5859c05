"""Completion callbacks from the transcoding service."""

import logging

from mediapipeline.clients import PipelineClients
from mediapipeline.coconut import TranscodeEvent, parse_transcode_event
from mediapipeline.errors import MediaTransferError, PipelineError, TranscodeServiceError

from .finalize import apply_upload_result
from .jobs import get_job, mark_failed
from .models import VideoJob
from .upload import upload_stored_media

logger = logging.getLogger(__name__)


def read_transcoded(key: str, clients: PipelineClients) -> bytes:
    try:
        with clients.storage.open(key, "rb") as fh:
            return fh.read()
    except Exception as e:
        raise MediaTransferError(f"Could not read transcoded video {key}: {e}") from e


def process_transcoded_output(job: VideoJob, event: TranscodeEvent, clients: PipelineClients) -> str:
    key = event.output_key()
    if not key:
        raise TranscodeServiceError("No output key found in transcoding result")

    data = read_transcoded(key, clients)
    logger.info("job %s: transcoded video %s, %d bytes", job.pk, key, len(data))

    # One attempt, no second round of transcoding
    result = upload_stored_media(job, data, clients, allow_transcoding=False)
    return apply_upload_result(job, result, clients, transcoded_key=key)


def handle_transcode_webhook(body, clients: PipelineClients):
    """Return ``(http_status, payload)`` for a transcoding callback."""
    event = parse_transcode_event(body)

    if not event.transcode_id:
        return 400, {"error": "Missing job ID"}
    if not event.video_job_id:
        return 400, {"error": "Missing video job ID"}

    job = get_job(event.video_job_id)
    if job is None:
        logger.warning("transcode webhook for unknown video job %s", event.video_job_id)
        return 404, {"error": "Video job not found"}

    logger.info("job %s: transcode %s status %s", job.pk, event.transcode_id, event.status)

    if job.is_terminal:
        return 200, {"message": f"Job already {job.status}", "videoJobId": str(job.pk)}
    if job.transcode_job_id and job.transcode_job_id != event.transcode_id:
        logger.warning(
            "job %s: ignoring callback for transcode %s, expecting %s",
            job.pk, event.transcode_id, job.transcode_job_id,
        )
        return 200, {"message": "Stale transcode callback ignored"}

    if event.succeeded:
        try:
            outcome = process_transcoded_output(job, event, clients)
        except PipelineError as e:
            mark_failed(job, str(e))
            outcome = "failed"
        except Exception as e:
            logger.exception("job %s: unexpected error handling transcode result", job.pk)
            mark_failed(job, f"Unexpected error: {e}")
            outcome = "failed"
        job.refresh_from_db()
        return 200, {
            "success": outcome != "failed",
            "outcome": outcome,
            "videoJobId": str(job.pk),
            "platformMediaId": job.platform_media_id,
        }

    if event.failed:
        reason = ", ".join(event.errors) or "Transcoding failed"
        mark_failed(job, f"Transcoding failed: {reason}")
        return 200, {"success": False, "message": "Transcoding failed", "errors": event.errors}

    # progress update, nothing to persist
    return 200, {"success": True, "message": "Processing update received",
                 "status": event.status, "progress": event.progress}
