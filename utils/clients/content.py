"""
Page content fetcher for Link Traffic Analyzer.

Downloads arbitrary HTML and reduces it to visible text for sentiment scoring.
"""

import logging
import re
from typing import Optional

import requests
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

_UNWANTED_TAGS = ("script", "style", "noscript", "template", "svg", "iframe")
_WHITESPACE = re.compile(r"\s+")

UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


def extract_visible_text(html: str) -> str:
    """Strip markup, scripts and styles; collapse whitespace."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(_UNWANTED_TAGS):
        tag.decompose()
    text = soup.get_text(separator=" ")
    return _WHITESPACE.sub(" ", text).strip()


class ContentFetcher:
    """Fetches web pages and returns their visible text."""

    def __init__(
        self,
        timeout: float = 10.0,
        max_chars: int = 100_000,
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout
        self.max_chars = max_chars
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": UA,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        })

    def close(self):
        self.session.close()

    def fetch_text(self, url: str) -> str:
        """
        Download ``url`` and return its visible text.

        Raises requests.RequestException on transport errors and non-2xx
        responses; the orchestrator decides how to degrade.
        """
        response = self.session.get(url, timeout=self.timeout, allow_redirects=True)
        response.raise_for_status()

        text = extract_visible_text(response.text)
        if len(text) > self.max_chars:
            text = text[: self.max_chars]

        logger.debug(f"Fetched {len(text)} chars of text from {url}")
        return text
