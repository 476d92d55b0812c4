"""Screenshot acquisition state machine and its driver."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from analyzer.screenshot import (
    CreateScan,
    Failed,
    NoCredentials,
    Polling,
    Ready,
    ScreenshotWorkflow,
    SearchExisting,
    is_terminal,
    on_poll_status,
    on_poll_timeout,
    on_scan_created,
    on_search_result,
    parse_screenshot_ref,
    screenshot_ref,
    start,
)
from config import ProviderCredentials
from utils.clients.cloudflare import ExistingScan, ScanStatus
from conftest import FakeScanner, hours_ago

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)
URL = "https://example.com"


def _workflow(scanner, **kwargs):
    kwargs.setdefault("poll_interval", 0)
    kwargs.setdefault("poll_timeout", 5)
    return ScreenshotWorkflow(scanner, **kwargs)


class TestTransitions:
    def test_start_without_credentials(self):
        assert start(URL, has_credentials=False) == NoCredentials()

    def test_start_with_credentials(self):
        assert start(URL, has_credentials=True) == SearchExisting(url=URL)

    def test_recent_scan_is_reused(self):
        existing = ExistingScan(scan_id="abc", time=NOW - timedelta(hours=23))
        assert on_search_result(SearchExisting(URL), existing, NOW) == Ready("abc")

    def test_stale_scan_triggers_new_scan(self):
        existing = ExistingScan(scan_id="abc", time=NOW - timedelta(hours=25))
        assert on_search_result(SearchExisting(URL), existing, NOW) == CreateScan(URL)

    def test_no_existing_scan(self):
        assert on_search_result(SearchExisting(URL), None, NOW) == CreateScan(URL)

    def test_custom_reuse_window(self):
        existing = ExistingScan(scan_id="abc", time=NOW - timedelta(hours=2))
        state = on_search_result(SearchExisting(URL), existing, NOW, timedelta(hours=1))
        assert state == CreateScan(URL)

    def test_scan_created(self):
        assert on_scan_created(CreateScan(URL), "abc") == Polling("abc")

    def test_scan_rejected(self):
        assert isinstance(on_scan_created(CreateScan(URL), None), Failed)

    @pytest.mark.parametrize(
        "status, expected",
        [
            (ScanStatus("Finished", True), Ready("abc")),
            (ScanStatus("Queued"), Polling("abc")),
            (ScanStatus("InProgress"), Polling("abc")),
            (None, Polling("abc")),
        ],
    )
    def test_poll_status(self, status, expected):
        assert on_poll_status(Polling("abc"), status) == expected

    @pytest.mark.parametrize("status", [ScanStatus("Failed"), ScanStatus("Finished", False)])
    def test_poll_failure(self, status):
        assert isinstance(on_poll_status(Polling("abc"), status), Failed)

    def test_poll_timeout_is_optimistic(self):
        assert on_poll_timeout(Polling("abc")) == Ready("abc")

    def test_terminal_states(self):
        assert is_terminal(NoCredentials())
        assert is_terminal(Ready("abc"))
        assert is_terminal(Failed("x"))
        assert not is_terminal(SearchExisting(URL))
        assert not is_terminal(CreateScan(URL))
        assert not is_terminal(Polling("abc"))


class TestScreenshotRefs:
    def test_ready_exposes_proxy_reference(self):
        assert Ready("abc-123").screenshot_url == "/screenshot/abc-123"

    def test_parse_round_trip(self):
        assert parse_screenshot_ref(screenshot_ref("abc-123")) == "abc-123"

    @pytest.mark.parametrize("ref", ["https://cdn.example.com/x.png", "/other/abc", "", None])
    def test_parse_rejects_other_references(self, ref):
        assert parse_screenshot_ref(ref) is None


class TestScreenshotWorkflow:
    def test_new_scan_polled_until_finished(self):
        scanner = FakeScanner(
            statuses=[ScanStatus("Queued"), ScanStatus("InProgress"), ScanStatus("Finished", True)]
        )
        result = asyncio.run(_workflow(scanner).run(URL))

        assert result.scan_id == "scan-1"
        assert result.screenshot_url == "/screenshot/scan-1"
        assert scanner.status_calls == 3

    def test_second_run_within_a_day_reuses_scan(self):
        scanner = FakeScanner()
        workflow = _workflow(scanner)

        first = asyncio.run(workflow.run(URL))
        second = asyncio.run(workflow.run(URL))

        assert first.scan_id == second.scan_id
        assert scanner.created == ["scan-1"]

    def test_existing_recent_scan_skips_creation(self):
        scanner = FakeScanner(existing={URL: ExistingScan("old-scan", hours_ago(3))})
        result = asyncio.run(_workflow(scanner).run(URL))

        assert result.scan_id == "old-scan"
        assert scanner.created == []
        assert scanner.status_calls == 0

    def test_stale_scan_is_replaced(self):
        scanner = FakeScanner(existing={URL: ExistingScan("old-scan", hours_ago(30))})
        result = asyncio.run(_workflow(scanner).run(URL))

        assert result.scan_id == "scan-1"

    def test_rejected_scan_yields_no_screenshot(self):
        scanner = FakeScanner(reject=True)
        assert asyncio.run(_workflow(scanner).run(URL)) is None

    def test_failed_scan_yields_no_screenshot(self):
        scanner = FakeScanner(statuses=[ScanStatus("Failed")])
        assert asyncio.run(_workflow(scanner).run(URL)) is None

    def test_timeout_assumes_ready(self):
        scanner = FakeScanner(statuses=[ScanStatus("InProgress")])
        workflow = _workflow(scanner, poll_interval=0.01, poll_timeout=0.05)

        result = asyncio.run(workflow.run(URL))

        assert result.scan_id == "scan-1"
        assert scanner.status_calls >= 1

    def test_no_scanner(self):
        assert asyncio.run(_workflow(None).run(URL)) is None

    def test_missing_account_id_means_no_credentials(self):
        scanner = FakeScanner(credentials=ProviderCredentials(api_token="token"))
        assert asyncio.run(_workflow(scanner).run(URL)) is None
        assert scanner.created == []

    def test_status_errors_keep_polling(self):
        class FlakyScanner(FakeScanner):
            def get_scan_status(self, scan_id):
                self.status_calls += 1
                if self.status_calls < 3:
                    raise ValueError("unexpected envelope")
                return ScanStatus("Finished", True)

        scanner = FlakyScanner()
        result = asyncio.run(_workflow(scanner).run(URL))

        assert result.scan_id == "scan-1"
        assert scanner.status_calls == 3

    def test_status_errors_until_timeout_assume_ready(self):
        class BrokenScanner(FakeScanner):
            def get_scan_status(self, scan_id):
                self.status_calls += 1
                raise ValueError("unexpected envelope")

        scanner = BrokenScanner()
        workflow = _workflow(scanner, poll_interval=0.01, poll_timeout=0.05)

        assert asyncio.run(workflow.run(URL)).scan_id == "scan-1"
