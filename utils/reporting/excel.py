"""
Excel export of analysis results: one row per URL, fixed 11-column schema.
"""

import io
import logging
from typing import List

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from models import AnalysisResult
from utils.reporting.common import data_source_label, display_rank, format_timestamp

logger = logging.getLogger(__name__)

SHEET_TITLE = "Analysis Results"

# (header, column width)
COLUMNS = [
    ("URL", 50),
    ("Global Rank", 14),
    ("Reach", 14),
    ("Unique Visitors", 18),
    ("Page Views", 16),
    ("Share Rate", 12),
    ("Sentiment", 12),
    ("Sentiment Score", 14),
    ("Data Source", 16),
    ("Analyzed At", 22),
    ("Error", 30),
]

_HEADER_FONT = Font(bold=True, color="FFFFFF", size=11)
_HEADER_FILL = PatternFill(start_color="2A2A2A", end_color="2A2A2A", fill_type="solid")


def result_row(result: AnalysisResult) -> list:
    return [
        result.url,
        display_rank(result),
        result.reach,
        result.unique_visitors,
        result.page_views,
        result.share_rate,
        result.sentiment.label,
        result.sentiment.score,
        data_source_label(result.data_source),
        format_timestamp(result.analyzed_at),
        result.error or "",
    ]


def generate_excel(results: List[AnalysisResult]) -> io.BytesIO:
    """Build the workbook in memory and return a rewound buffer."""
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    ws.append([header for header, _ in COLUMNS])
    for col, (_, width) in enumerate(COLUMNS, start=1):
        cell = ws.cell(row=1, column=col)
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.alignment = Alignment(horizontal="center", vertical="center")
        ws.column_dimensions[get_column_letter(col)].width = width

    for result in results:
        ws.append(result_row(result))
        # Values are client supplied; a leading "=" must stay text, not a formula
        for cell in ws[ws.max_row]:
            if isinstance(cell.value, str):
                cell.data_type = "s"

    ws.freeze_panes = "A2"

    buffer = io.BytesIO()
    wb.save(buffer)
    buffer.seek(0)

    logger.info(f"Excel export built with {len(results)} row(s)")
    return buffer
