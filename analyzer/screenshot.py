"""
Screenshot acquisition workflow.

The workflow is an explicit state machine:

    NoCredentials                      (terminal, no screenshot)
    SearchExisting -> Ready            (scan of this URL < 24h old)
                   -> CreateScan
    CreateScan     -> Polling | Failed
    Polling        -> Ready | Failed | Polling
                   -> Ready            (poll timeout, optimistic)

Transition functions are pure; ScreenshotWorkflow performs the I/O that
feeds them. Ready states expose a proxy reference (/screenshot/{scan_id})
instead of the provider's screenshot URL.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Union

from tenacity import AsyncRetrying, retry_if_result, stop_after_delay, wait_fixed

from utils.clients.cloudflare import ExistingScan, ScanStatus, UrlScannerClient

logger = logging.getLogger(__name__)

SCREENSHOT_ROUTE = "/screenshot"
_SCREENSHOT_REF = re.compile(rf"^{SCREENSHOT_ROUTE}/([A-Za-z0-9-]+)$")

DEFAULT_REUSE_WINDOW = timedelta(hours=24)


# ======================
# States
# ======================

@dataclass(frozen=True)
class NoCredentials:
    pass


@dataclass(frozen=True)
class SearchExisting:
    url: str


@dataclass(frozen=True)
class CreateScan:
    url: str


@dataclass(frozen=True)
class Polling:
    scan_id: str


@dataclass(frozen=True)
class Ready:
    scan_id: str

    @property
    def screenshot_url(self) -> str:
        return screenshot_ref(self.scan_id)


@dataclass(frozen=True)
class Failed:
    reason: str


ScanState = Union[NoCredentials, SearchExisting, CreateScan, Polling, Ready, Failed]
TERMINAL_STATES = (NoCredentials, Ready, Failed)


@dataclass(frozen=True)
class ScanResult:
    scan_id: str
    screenshot_url: str


def screenshot_ref(scan_id: str) -> str:
    """Proxy reference served by the GET /screenshot/{scan_id} route."""
    return f"{SCREENSHOT_ROUTE}/{scan_id}"


def parse_screenshot_ref(ref: str) -> Optional[str]:
    """Scan id of a proxy reference, or None for anything else."""
    match = _SCREENSHOT_REF.match(ref or "")
    return match.group(1) if match else None


def is_terminal(state: ScanState) -> bool:
    return isinstance(state, TERMINAL_STATES)


# ======================
# Pure transitions
# ======================

def start(url: str, has_credentials: bool) -> ScanState:
    if not has_credentials:
        return NoCredentials()
    return SearchExisting(url=url)


def on_search_result(
    state: SearchExisting,
    existing: Optional[ExistingScan],
    now: datetime,
    reuse_window: timedelta = DEFAULT_REUSE_WINDOW,
) -> ScanState:
    if existing is not None and now - existing.time < reuse_window:
        return Ready(scan_id=existing.scan_id)
    return CreateScan(url=state.url)


def on_scan_created(state: CreateScan, scan_id: Optional[str]) -> ScanState:
    if not scan_id:
        return Failed(reason=f"Scan could not be created for {state.url}")
    return Polling(scan_id=scan_id)


def on_poll_status(state: Polling, status: Optional[ScanStatus]) -> ScanState:
    # None means the status request itself failed; keep polling
    if status is None:
        return state
    if status.status == "Finished":
        if status.success:
            return Ready(scan_id=state.scan_id)
        return Failed(reason=f"Scan {state.scan_id} finished unsuccessfully")
    if status.status == "Failed":
        return Failed(reason=f"Scan {state.scan_id} failed")
    return state


def on_poll_timeout(state: Polling) -> ScanState:
    # The screenshot may still materialize; the proxy 404s if it never does
    return Ready(scan_id=state.scan_id)


# ======================
# Driver
# ======================

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScreenshotWorkflow:
    """
    Drives the scan state machine against the URL Scanner API.
    """

    def __init__(
        self,
        scanner: Optional[UrlScannerClient],
        poll_interval: float = 2.0,
        poll_timeout: float = 30.0,
        reuse_window: timedelta = DEFAULT_REUSE_WINDOW,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.scanner = scanner
        self.poll_interval = poll_interval
        self.poll_timeout = poll_timeout
        self.reuse_window = reuse_window
        self.clock = clock

    async def run(self, url: str) -> Optional[ScanResult]:
        """Run the workflow to a terminal state. Returns None unless Ready."""
        has_credentials = self.scanner is not None and self.scanner.credentials.can_scan
        state = start(url, has_credentials)

        while not is_terminal(state):
            state = await self.step(state)

        if isinstance(state, Ready):
            return ScanResult(scan_id=state.scan_id, screenshot_url=state.screenshot_url)
        if isinstance(state, Failed):
            logger.info(f"No screenshot for {url}: {state.reason}")
        return None

    async def step(self, state: ScanState) -> ScanState:
        if isinstance(state, SearchExisting):
            existing = await asyncio.to_thread(self.scanner.find_latest_scan, state.url)
            return on_search_result(state, existing, self.clock(), self.reuse_window)

        if isinstance(state, CreateScan):
            scan_id = await asyncio.to_thread(self.scanner.create_scan, state.url)
            return on_scan_created(state, scan_id)

        if isinstance(state, Polling):
            return await self._wait_for_scan(state)

        return state

    async def _poll_once(self, state: Polling) -> ScanState:
        try:
            status = await asyncio.to_thread(self.scanner.get_scan_status, state.scan_id)
        except Exception as e:
            logger.warning(f"Status check failed for scan {state.scan_id}: {str(e)}")
            status = None
        return on_poll_status(state, status)

    async def _wait_for_scan(self, state: Polling) -> ScanState:
        retrying = AsyncRetrying(
            stop=stop_after_delay(self.poll_timeout),
            wait=wait_fixed(self.poll_interval),
            retry=retry_if_result(lambda s: isinstance(s, Polling)),
            retry_error_callback=lambda retry_state: retry_state.outcome.result(),
        )
        result = await retrying(self._poll_once, state)

        if isinstance(result, Polling):
            logger.info(f"Scan {result.scan_id} still pending after {self.poll_timeout}s")
            return on_poll_timeout(result)
        return result
