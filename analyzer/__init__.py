# Analyzer package - traffic estimation, screenshots, sentiment, orchestration
from .estimation import (
    bucket_to_rank,
    estimate_share_rate,
    estimate_traffic_from_rank,
    format_number,
    heuristic_rank,
)
from .traffic import TrafficResolver
from .screenshot import ScreenshotWorkflow, ScanResult
from .sentiment import analyze_sentiment
from .orchestrator import LinkAnalyzer, error_result

__all__ = [
    "bucket_to_rank",
    "estimate_share_rate",
    "estimate_traffic_from_rank",
    "format_number",
    "heuristic_rank",
    "TrafficResolver",
    "ScreenshotWorkflow",
    "ScanResult",
    "analyze_sentiment",
    "LinkAnalyzer",
    "error_result",
]
