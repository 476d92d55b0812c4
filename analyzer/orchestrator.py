"""
Per-URL and batch orchestration for Link Traffic Analyzer.

For each URL, traffic resolution, the screenshot workflow and the page
content fetch run concurrently. Screenshot and content failures only drop
their own field; anything else turns into an all-"N/A" result carrying the
error message.
"""

import asyncio
import logging
import random
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from analyzer.estimation import RandomSource
from analyzer.screenshot import ScreenshotWorkflow
from analyzer.sentiment import analyze_sentiment, neutral_sentiment
from analyzer.traffic import TrafficResolver
from config import Settings
from models import AnalysisResult
from utils.clients.cloudflare import RadarClient, UrlScannerClient
from utils.clients.content import ContentFetcher

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def error_result(url: str, error: str) -> AnalysisResult:
    """Sentinel result: every metric 'N/A', neutral sentiment."""
    return AnalysisResult(
        url=url,
        sentiment=neutral_sentiment(),
        analyzed_at=_timestamp(),
        error=error or "Analysis failed",
    )


class LinkAnalyzer:
    """
    Runs the traffic, screenshot and sentiment pipeline for batches of URLs.
    """

    def __init__(
        self,
        traffic: TrafficResolver,
        screenshots: ScreenshotWorkflow,
        content: ContentFetcher,
    ):
        self.traffic = traffic
        self.screenshots = screenshots
        self.content = content

    @classmethod
    def from_settings(cls, settings: Settings, rng: RandomSource = random) -> "LinkAnalyzer":
        credentials = settings.credentials
        return cls(
            traffic=TrafficResolver(RadarClient(credentials), rng=rng),
            screenshots=ScreenshotWorkflow(
                UrlScannerClient(credentials),
                poll_interval=settings.SCAN_POLL_INTERVAL,
                poll_timeout=settings.SCAN_POLL_TIMEOUT,
                reuse_window=timedelta(seconds=settings.SCAN_REUSE_WINDOW),
            ),
            content=ContentFetcher(
                timeout=settings.CONTENT_FETCH_TIMEOUT,
                max_chars=settings.CONTENT_MAX_CHARS,
            ),
        )

    async def analyze_url(self, url: str) -> AnalysisResult:
        try:
            traffic, scan, page_text = await asyncio.gather(
                asyncio.to_thread(self.traffic.get_traffic_data, url),
                self._optional(self.screenshots.run(url), "screenshot", url),
                self._optional(asyncio.to_thread(self.content.fetch_text, url), "content", url),
            )

            sentiment = analyze_sentiment(page_text) if page_text else neutral_sentiment()

            return AnalysisResult(
                url=url,
                reach=traffic.reach,
                unique_visitors=traffic.unique_visitors,
                page_views=traffic.page_views,
                share_rate=traffic.share_rate,
                rank=traffic.rank,
                bucket=traffic.bucket,
                data_source=traffic.source,
                screenshot_url=scan.screenshot_url if scan else None,
                sentiment=sentiment,
                analyzed_at=_timestamp(),
            )
        except Exception as e:
            logger.error(f"❌ Analysis failed for {url}: {str(e)}")
            return error_result(url, str(e))

    async def analyze_urls(self, urls: List[str]) -> List[AnalysisResult]:
        """Analyze every URL concurrently; results keep the input order."""
        logger.info(f"Analyzing {len(urls)} URL(s)")
        return list(await asyncio.gather(*(self.analyze_url(url) for url in urls)))

    def close(self):
        """Release the HTTP sessions held by the underlying clients."""
        for client in (self.traffic.radar, self.screenshots.scanner, self.content):
            close = getattr(client, "close", None)
            if close is not None:
                close()

    @staticmethod
    async def _optional(awaitable, what: str, url: str) -> Optional[object]:
        try:
            return await awaitable
        except Exception as e:
            logger.warning(f"⚠️  {what} unavailable for {url}: {str(e)}")
            return None
