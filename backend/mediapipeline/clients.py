from dataclasses import dataclass, field
from typing import Any

import requests

from .apify import ApifyClient
from .coconut import CoconutClient
from .screening import TranscodingLimits
from .twitter import TwitterClientFactory


@dataclass
class PipelineClients:
    """Collaborators shared by every stage, built once at startup."""

    downloader: ApifyClient
    transcoder: CoconutClient
    twitter: TwitterClientFactory
    storage: Any
    http: requests.Session
    limits: TranscodingLimits = field(default_factory=TranscodingLimits)
    webhook_url: str = ""
    media_base_url: str = ""
    bucket_name: str = ""
    http_timeout: float = 60

    def public_url(self, key: str) -> str:
        url = self.storage.url(key)
        if url.startswith("http://") or url.startswith("https://"):
            return url
        return f"{self.media_base_url.rstrip('/')}/{url.lstrip('/')}"
