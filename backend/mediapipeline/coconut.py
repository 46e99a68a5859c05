"""Client for the push based transcoding service."""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from .errors import TranscodeServiceError

logger = logging.getLogger(__name__)

# H.264/AAC MP4, accepted by the upload API
OUTPUT_PROFILE = {
    "video": {"codec": "h264", "bitrate": "2000k", "fps": 30, "size": "1280x720"},
    "audio": {"codec": "aac", "bitrate": "128k"},
}


class CoconutClient:
    def __init__(self, api_key: str, base_url: str = "https://api.coconut.co",
                 session: Optional[requests.Session] = None, timeout: float = 30):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def build_job(self, source_url: str, output_path: str, webhook_url: str,
                  metadata: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "source": source_url,
            "webhook": webhook_url,
            "outputs": {"mp4": {"path": output_path, **OUTPUT_PROFILE}},
            "metadata": metadata,
        }

    def create_job(self, source_url: str, output_path: str, webhook_url: str,
                   metadata: Dict[str, Any]) -> str:
        if not self.api_key:
            raise TranscodeServiceError("COCONUT_API_KEY environment variable is required")

        body = self.build_job(source_url, output_path, webhook_url, metadata)
        try:
            resp = self.session.post(
                f"{self.base_url}/job",
                json=body,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TranscodeServiceError(f"Transcoding service unreachable: {e}") from e

        if not resp.ok:
            raise TranscodeServiceError(f"Transcoding service error: {resp.status_code} - {resp.text[:200]}")

        job_id = resp.json().get("id")
        if not job_id:
            raise TranscodeServiceError("Transcoding service did not return a job id")
        logger.info("created transcode job %s -> %s", job_id, output_path)
        return str(job_id)


S3_PREFIX_RE = re.compile(r"^s3://[^/]+/")


@dataclass(frozen=True)
class TranscodeEvent:
    transcode_id: Optional[str]
    status: str
    video_job_id: Optional[str] = None
    progress: Any = None
    errors: List[str] = field(default_factory=list)
    outputs: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == "completed" and bool(self.outputs)

    @property
    def failed(self) -> bool:
        if self.status == "completed" and not self.outputs:
            return True
        return self.status == "failed" or bool(self.errors)

    def output_key(self) -> Optional[str]:
        if not self.outputs:
            return None
        output = self.outputs[0]
        key = output.get("key")
        if key:
            return key
        path = output.get("path") or ""
        return S3_PREFIX_RE.sub("", path) or None


def _error_strings(errors) -> List[str]:
    if isinstance(errors, dict):
        errors = list(errors.values())
    elif not isinstance(errors, list):
        errors = [errors]
    messages = []
    for error in errors:
        if isinstance(error, dict):
            error = error.get("message") or error
        messages.append(str(error))
    return messages


def parse_transcode_event(body: Dict[str, Any]) -> TranscodeEvent:
    """Read a webhook payload, tolerating the field names seen in the wild."""
    body = body or {}
    status = body.get("status") or ("completed" if body.get("event") == "job.completed" else "processing")
    metadata = (body.get("input") or {}).get("metadata") or body.get("metadata") or {}
    outputs = body.get("outputs") or []
    if isinstance(outputs, dict):
        outputs = list(outputs.values())

    job_id = body.get("id") or body.get("job_id")
    video_job_id = metadata.get("video_job_id") or metadata.get("videoJobId")
    return TranscodeEvent(
        transcode_id=str(job_id) if job_id else None,
        status=str(status).lower(),
        video_job_id=str(video_job_id) if video_job_id else None,
        progress=body.get("progress") or body.get("percent"),
        errors=_error_strings(body.get("errors") or []),
        outputs=[o for o in outputs if isinstance(o, dict)],
    )
