"""
Shared fakes for the provider clients.

The fakes expose the same methods and ``credentials`` attribute as the real
Cloudflare/content clients, so they can be handed to TrafficResolver,
ScreenshotWorkflow and LinkAnalyzer directly.
"""

import io
import itertools
from datetime import datetime, timedelta, timezone

import pytest
from PIL import Image

from config import ProviderCredentials
from utils.clients.cloudflare import DomainRanking, ExistingScan, ScanStatus

FULL_CREDENTIALS = ProviderCredentials(api_token="test-token", account_id="acct-123")


class FixedRandom:
    """Random source that always returns the same value."""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


class FakeRadar:
    def __init__(self, rankings=None, credentials=FULL_CREDENTIALS, error=None):
        self.rankings = rankings or {}
        self.credentials = credentials
        self.error = error
        self.lookups = []

    def get_domain_ranking(self, hostname):
        self.lookups.append(hostname)
        if self.error:
            raise self.error
        return self.rankings.get(hostname)


class FakeScanner:
    """
    In-memory URL Scanner.

    Created scans are remembered per URL so find_latest_scan behaves like the
    provider's search endpoint.
    """

    def __init__(
        self,
        credentials=FULL_CREDENTIALS,
        statuses=None,
        reject=False,
        screenshots=None,
        existing=None,
    ):
        self.credentials = credentials
        self.statuses = list(statuses or [ScanStatus("Finished", True)])
        self.reject = reject
        self.screenshots = dict(screenshots or {})
        self.scans = dict(existing or {})
        self.created = []
        self.status_calls = 0
        self._ids = itertools.count(1)

    def find_latest_scan(self, url):
        return self.scans.get(url)

    def create_scan(self, url):
        if self.reject:
            return None
        scan_id = f"scan-{next(self._ids)}"
        self.created.append(scan_id)
        self.scans[url] = ExistingScan(scan_id=scan_id, time=datetime.now(timezone.utc))
        return scan_id

    def get_scan_status(self, scan_id):
        self.status_calls += 1
        if len(self.statuses) > 1:
            return self.statuses.pop(0)
        return self.statuses[0]

    def get_screenshot(self, scan_id):
        return self.screenshots.get(scan_id)


class FakeFetcher:
    def __init__(self, texts=None, error=None):
        self.texts = texts or {}
        self.error = error

    def fetch_text(self, url):
        if self.error:
            raise self.error
        return self.texts.get(url, "")


def png_bytes(width=320, height=180, mode="RGB") -> bytes:
    image = Image.new(mode, (width, height), (30, 120, 200, 255)[: len(mode)])
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def hours_ago(hours: float) -> datetime:
    return datetime.now(timezone.utc) - timedelta(hours=hours)


@pytest.fixture
def fake_radar():
    return FakeRadar(
        rankings={
            "example.com": DomainRanking(rank=1234, bucket="2000"),
            "bucketonly.com": DomainRanking(rank=None, bucket="500"),
        }
    )


@pytest.fixture
def fake_scanner():
    return FakeScanner()


@pytest.fixture
def fake_fetcher():
    return FakeFetcher(
        texts={
            "https://example.com": "We love this wonderful and amazing community",
            "https://bucketonly.com": "A terrible, awful and horrible experience",
        }
    )
