import logging

from django.conf import settings

from mediapipeline.clients import PipelineClients
from mediapipeline.results import TranscodingStarted
from mediapipeline.screening import ScreeningResult

from .jobs import record
from .models import TranscodingUsage, VideoJob
from .transfer import build_storage_key

logger = logging.getLogger(__name__)


def output_location(key: str, bucket: str) -> str:
    return f"s3://{bucket}/{key}" if bucket else key


def start_transcoding(job: VideoJob, clients: PipelineClients,
                      screening: ScreeningResult) -> TranscodingStarted:
    """Submit the stored file for re-encoding and return without waiting.

    Completion arrives through the transcode webhook, correlated by the
    job id carried in the submission metadata.
    """
    output_key = build_storage_key(settings.VIDEO_PIPELINE["TRANSCODE_CATEGORY"], job.user_id)
    transcode_id = clients.transcoder.create_job(
        source_url=clients.public_url(job.storage_key),
        output_path=output_location(output_key, clients.bucket_name),
        webhook_url=clients.webhook_url,
        metadata={"video_job_id": str(job.pk)},
    )

    TranscodingUsage.objects.create(
        user_id=job.user_id,
        video_job=job,
        file_size_mb=screening.file_size_mb,
        estimated_minutes=screening.estimated_minutes,
        estimated_cost=screening.estimated_cost,
    )
    record(job, transcode_job_id=transcode_id)
    logger.info(
        "job %s: transcode %s submitted, est. $%.2f", job.pk, transcode_id, screening.estimated_cost
    )
    return TranscodingStarted(transcode_job_id=transcode_id, output_key=output_key)
