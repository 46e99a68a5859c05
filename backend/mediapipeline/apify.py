"""Client for the run based scraping service that resolves platform links."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from .errors import DownloadServiceError

logger = logging.getLogger(__name__)

SUCCEEDED = "SUCCEEDED"
FAILED = "FAILED"
ABORTED = "ABORTED"
TERMINAL_FAILURES = {FAILED, ABORTED}


@dataclass(frozen=True)
class RunStatus:
    status: str
    dataset_id: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCEEDED

    @property
    def failed(self) -> bool:
        return self.status in TERMINAL_FAILURES


class ApifyClient:
    def __init__(self, token: str, actor_id: str,
                 base_url: str = "https://api.apify.com/v2",
                 session: Optional[requests.Session] = None, timeout: float = 30):
        self.token = token
        self.actor_id = actor_id
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs) -> Any:
        if not self.token:
            raise DownloadServiceError("Video downloader is not configured (APIFY_API_TOKEN missing)")
        url = f"{self.base_url}{path}"
        params = {"token": self.token}
        try:
            resp = self.session.request(method, url, params=params, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise DownloadServiceError(f"Download service unreachable: {e}") from e
        if not resp.ok:
            raise DownloadServiceError(
                f"Download service returned {resp.status_code} for {method} {path}: {resp.text[:200]}"
            )
        return resp.json()

    def start_run(self, video_url: str, quality: str = "high") -> str:
        payload = self._request(
            "POST",
            f"/acts/{self.actor_id}/runs",
            json={"video_url": video_url, "quality": quality},
        )
        run_id = (payload.get("data") or {}).get("id")
        if not run_id:
            raise DownloadServiceError("Download service did not return a run id")
        logger.info("started download run %s for %s", run_id, video_url)
        return run_id

    def get_run(self, run_id: str) -> RunStatus:
        payload = self._request("GET", f"/actor-runs/{run_id}")
        data = payload.get("data") or {}
        return RunStatus(
            status=data.get("status") or "UNKNOWN",
            dataset_id=data.get("defaultDatasetId") or data.get("resultDatasetId"),
        )

    def get_dataset_items(self, dataset_id: str) -> List[Dict[str, Any]]:
        result = self._request("GET", f"/datasets/{dataset_id}/items")
        # Either a bare list or {"items": [...]}
        if isinstance(result, list):
            return result
        return result.get("items") or []
