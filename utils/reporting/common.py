"""
Display helpers shared by the Excel and PDF renderers.
"""

from datetime import datetime
from typing import Optional

from models import NOT_AVAILABLE, AnalysisResult, DataSource

EXACT_SOURCE_LABEL = "Cloudflare Radar"
ESTIMATED_SOURCE_LABEL = "Estimated"


def display_rank(result: AnalysisResult) -> str:
    """'#1,234' for an exact rank, else the bucket label, else 'N/A'."""
    if result.rank:
        return f"#{result.rank:,}"
    return result.bucket or NOT_AVAILABLE


def data_source_label(source: Optional[DataSource]) -> str:
    """Anything short of an exact Radar rank, error results included, is 'Estimated'."""
    if source == DataSource.EXACT:
        return EXACT_SOURCE_LABEL
    return ESTIMATED_SOURCE_LABEL


def format_timestamp(value: str) -> str:
    """Render an ISO timestamp as 'MM/DD/YYYY, HH:MM:SS'; unparsable input passes through."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return value or ""
    return parsed.strftime("%m/%d/%Y, %H:%M:%S")


def sentiment_summary(result: AnalysisResult) -> str:
    return f"{result.sentiment.label} (score: {_number(result.sentiment.score)})"


def _number(value: float):
    return int(value) if float(value).is_integer() else value
