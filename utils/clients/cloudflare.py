"""
Cloudflare API clients for Link Traffic Analyzer.

- RadarClient: domain ranking lookups (rank / popularity bucket)
- UrlScannerClient: search, create and poll URL scans, fetch screenshots

Both clients swallow transport and provider errors, log them, and return None.
Callers treat None as "no data" and degrade gracefully.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from config import ProviderCredentials

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DomainRanking:
    rank: Optional[int]
    bucket: str


@dataclass(frozen=True)
class ExistingScan:
    scan_id: str
    time: datetime
    status: str = ""


@dataclass(frozen=True)
class ScanStatus:
    status: str
    success: bool = False


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse a Cloudflare ISO-8601 timestamp into an aware UTC datetime."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class CloudflareClient:
    """
    Shared session handling for Cloudflare API v4 endpoints.
    """

    def __init__(
        self,
        credentials: ProviderCredentials,
        session: Optional[requests.Session] = None,
    ):
        self.credentials = credentials
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.credentials.api_token}",
            "Content-Type": "application/json",
        }

    def close(self):
        self.session.close()

    def _url(self, path: str) -> str:
        return f"{self.credentials.api_base}/{path.lstrip('/')}"

    def _request_json(self, method: str, path: str, **kwargs) -> Optional[Dict[str, Any]]:
        """
        Perform a request and decode the JSON envelope.

        Returns None on network errors and undecodable bodies. Non-2xx
        responses are returned only when ``allow_error_body`` is set, because
        the scan endpoints report rejections inside the envelope.
        """
        allow_error_body = kwargs.pop("allow_error_body", False)
        try:
            response = self.session.request(
                method,
                self._url(path),
                headers=self._headers(),
                timeout=self.credentials.timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            logger.error(f"Cloudflare {method} {path} failed: {str(e)}")
            return None

        if not response.ok and not allow_error_body:
            logger.error(f"Cloudflare API error: {response.status_code} for {path}")
            return None

        try:
            return response.json()
        except ValueError:
            logger.error(f"Cloudflare returned non-JSON body for {path}")
            return None


class RadarClient(CloudflareClient):
    """Cloudflare Radar domain ranking lookups."""

    def get_domain_ranking(self, hostname: str) -> Optional[DomainRanking]:
        """
        Look up the ranking of a hostname.

        Returns None when the domain is not ranked or the API is unavailable.
        """
        data = self._request_json("GET", f"radar/ranking/domain/{quote(hostname)}")
        if not data or not data.get("success"):
            return None

        details = (data.get("result") or {}).get("details_0")
        if not details:
            logger.info(f"No Radar ranking for {hostname}")
            return None

        rank = details.get("rank")
        return DomainRanking(
            rank=int(rank) if rank is not None else None,
            bucket=str(details.get("bucket") or ""),
        )


class UrlScannerClient(CloudflareClient):
    """Cloudflare URL Scanner: scans, scan status and screenshots."""

    def _scan_path(self, suffix: str = "") -> str:
        return f"accounts/{self.credentials.account_id}/urlscanner/scan{suffix}"

    def find_latest_scan(self, url: str) -> Optional[ExistingScan]:
        """Most recent scan of exactly this URL, if the provider has one."""
        data = self._request_json(
            "GET", self._scan_path(), params={"page_url": url, "limit": 1}
        )
        if not data or not data.get("success"):
            return None

        tasks = (data.get("result") or {}).get("tasks") or []
        if not tasks:
            return None

        task = tasks[0]
        scan_time = parse_timestamp(task.get("time", ""))
        if not task.get("uuid") or scan_time is None:
            return None

        return ExistingScan(
            scan_id=task["uuid"], time=scan_time, status=task.get("status", "")
        )

    def create_scan(self, url: str) -> Optional[str]:
        """Submit a new scan and return its identifier, or None if rejected."""
        data = self._request_json(
            "POST",
            self._scan_path(),
            json={"url": url, "screenshotsResolutions": ["desktop"]},
            allow_error_body=True,
        )
        if not data:
            return None

        scan_id = (data.get("result") or {}).get("uuid")
        if data.get("success") and scan_id:
            logger.info(f"URL Scanner: created scan {scan_id} for {url}")
            return scan_id

        errors = data.get("errors") or []
        if any("Unsupported hostname" in str(e.get("message", "")) for e in errors):
            logger.info(f"URL Scanner: {url} is not supported for scanning")
        elif errors:
            logger.warning(f"URL Scanner error for {url}: {errors}")
        return None

    def get_scan_status(self, scan_id: str) -> Optional[ScanStatus]:
        """Current task status of a scan, or None if it could not be read."""
        data = self._request_json("GET", self._scan_path(f"/{scan_id}"))
        if not data:
            return None

        task = (((data.get("result") or {}).get("scan") or {}).get("task")) or {}
        status = task.get("status")
        if not status:
            return None
        return ScanStatus(status=status, success=bool(task.get("success", False)))

    def get_screenshot(self, scan_id: str) -> Optional[bytes]:
        """Desktop screenshot PNG bytes for a scan."""
        if not self.credentials.can_scan:
            return None

        try:
            response = self.session.get(
                self._url(self._scan_path(f"/{scan_id}/screenshot")),
                params={"resolution": "desktop"},
                headers={"Authorization": f"Bearer {self.credentials.api_token}"},
                timeout=self.credentials.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Error fetching screenshot {scan_id}: {str(e)}")
            return None

        if not response.ok:
            logger.info(f"Screenshot fetch failed for {scan_id}: {response.status_code}")
            return None

        return response.content
