"""Stage outcomes.

Each stage returns exactly one variant, the job row stays a flat record.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Union


@dataclass(frozen=True)
class DownloadPending:
    delay_seconds: int


@dataclass(frozen=True)
class DownloadResolved:
    media_url: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DownloadFailed:
    reason: str


DownloadResult = Union[DownloadPending, DownloadResolved, DownloadFailed]


@dataclass(frozen=True)
class Uploaded:
    media_id: str


@dataclass(frozen=True)
class TranscodingStarted:
    transcode_job_id: str
    output_key: str


@dataclass(frozen=True)
class UploadRejected:
    reason: str


UploadResult = Union[Uploaded, TranscodingStarted, UploadRejected]
