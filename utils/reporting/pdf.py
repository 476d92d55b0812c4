"""
Link Traffic Analysis PDF Report Generator

One block per analyzed URL: title, data source, then either the error or a
metrics table with an optional screenshot preview and the analysis time.
Pages break automatically and carry "Page i of N" footers.
"""

import io
import logging
import os
from datetime import datetime
from typing import Callable, List, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas
from reportlab.platypus import (
    Image,
    KeepTogether,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from models import AnalysisResult
from utils.image_processor import prepare_screenshot
from utils.reporting.common import (
    data_source_label,
    display_rank,
    format_timestamp,
    sentiment_summary,
)

logger = logging.getLogger(__name__)

ScreenshotLoader = Callable[[str], Optional[bytes]]

# Helvetica ships with every PDF viewer; DejaVu is used when available so
# non-Latin URLs render
FONT_NAME = "Helvetica"
FONT_NAME_BOLD = "Helvetica-Bold"
DEJAVU_DIR = "/usr/share/fonts/truetype/dejavu"

MAX_URL_LENGTH = 70
PAGE_MARGIN = 14 * mm
PREVIEW_WIDTH = 120 * mm
PREVIEW_MAX_HEIGHT = 120 * mm

COLORS = {
    "dark_gray": colors.HexColor("#2A2A2A"),
    "medium_gray": colors.HexColor("#808080"),
    "stripe": colors.HexColor("#F3F4F6"),
    "error_red": colors.HexColor("#DC2626"),
    "white": colors.white,
}


def register_fonts():
    """Register DejaVu Sans if installed, otherwise keep Helvetica"""
    global FONT_NAME, FONT_NAME_BOLD

    if FONT_NAME == "DejaVu-Sans":
        return

    regular = os.path.join(DEJAVU_DIR, "DejaVuSans.ttf")
    bold = os.path.join(DEJAVU_DIR, "DejaVuSans-Bold.ttf")
    if not (os.path.exists(regular) and os.path.exists(bold)):
        logger.info("Using Helvetica font (DejaVu Sans not found)")
        return

    try:
        pdfmetrics.registerFont(TTFont("DejaVu-Sans", regular))
        pdfmetrics.registerFont(TTFont("DejaVu-Sans-Bold", bold))
    except Exception as e:
        logger.warning(f"Could not register DejaVu Sans, using Helvetica: {str(e)}")
        return

    FONT_NAME = "DejaVu-Sans"
    FONT_NAME_BOLD = "DejaVu-Sans-Bold"


def create_custom_styles():
    """Create paragraph styles for the report"""
    styles = getSampleStyleSheet()

    styles.add(
        ParagraphStyle(
            name="ReportTitle",
            parent=styles["Heading1"],
            fontSize=20,
            textColor=COLORS["dark_gray"],
            spaceAfter=4,
            alignment=TA_CENTER,
            fontName=FONT_NAME_BOLD,
        )
    )

    styles.add(
        ParagraphStyle(
            name="ReportSubtitle",
            parent=styles["Normal"],
            fontSize=10,
            textColor=COLORS["medium_gray"],
            spaceAfter=14,
            alignment=TA_CENTER,
            fontName=FONT_NAME,
        )
    )

    styles.add(
        ParagraphStyle(
            name="ResultTitle",
            parent=styles["Normal"],
            fontSize=11,
            textColor=COLORS["dark_gray"],
            spaceAfter=3,
            fontName=FONT_NAME_BOLD,
        )
    )

    styles.add(
        ParagraphStyle(
            name="MetaText",
            parent=styles["Normal"],
            fontSize=8,
            textColor=COLORS["medium_gray"],
            spaceAfter=4,
            fontName=FONT_NAME,
        )
    )

    styles.add(
        ParagraphStyle(
            name="ErrorText",
            parent=styles["Normal"],
            fontSize=10,
            textColor=COLORS["error_red"],
            spaceAfter=4,
            fontName=FONT_NAME,
        )
    )

    return styles


class NumberedCanvas(canvas.Canvas):
    """Canvas that defers page output so each footer can show the page total"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        page_count = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_page_number(page_count)
            super().showPage()
        super().save()

    def _draw_page_number(self, page_count: int):
        width, _ = self._pagesize
        self.setFont(FONT_NAME, 8)
        self.setFillColor(COLORS["medium_gray"])
        self.drawCentredString(width / 2, 10 * mm, f"Page {self._pageNumber} of {page_count}")


def truncate_url(url: str, limit: int = MAX_URL_LENGTH) -> str:
    if len(url) > limit:
        return url[: limit - 3] + "..."
    return url


def create_metrics_table(result: AnalysisResult) -> Table:
    """Two-column Metric/Value table"""
    rows = [
        ["Metric", "Value"],
        ["Global Rank", display_rank(result)],
        ["Reach", result.reach],
        ["Unique Visitors", result.unique_visitors],
        ["Page Views", result.page_views],
        ["Share Rate", result.share_rate],
        ["Sentiment", sentiment_summary(result)],
    ]

    table = Table(rows, colWidths=[50 * mm, 80 * mm], hAlign="LEFT")
    table.setStyle(
        TableStyle(
            [
                # Header row
                ("BACKGROUND", (0, 0), (-1, 0), COLORS["dark_gray"]),
                ("TEXTCOLOR", (0, 0), (-1, 0), COLORS["white"]),
                ("FONTNAME", (0, 0), (-1, 0), FONT_NAME_BOLD),
                # Body rows
                ("FONTNAME", (0, 1), (-1, -1), FONT_NAME),
                ("TEXTCOLOR", (0, 1), (-1, -1), COLORS["dark_gray"]),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [COLORS["white"], COLORS["stripe"]]),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("TOPPADDING", (0, 0), (-1, -1), 4),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ]
        )
    )
    return table


def create_preview(
    screenshot_url: str, screenshot_loader: ScreenshotLoader, max_dimension: int
) -> Optional[Image]:
    """Screenshot flowable, or None when the screenshot cannot be loaded"""
    try:
        raw = screenshot_loader(screenshot_url)
    except Exception as e:
        logger.warning(f"Screenshot load failed for {screenshot_url}: {str(e)}")
        return None

    prepared = prepare_screenshot(raw, max_dimension=max_dimension) if raw else None
    if prepared is None:
        return None

    width = PREVIEW_WIDTH
    height = width * prepared.height / prepared.width
    if height > PREVIEW_MAX_HEIGHT:
        width = width * PREVIEW_MAX_HEIGHT / height
        height = PREVIEW_MAX_HEIGHT

    image = Image(prepared.buffer, width=width, height=height)
    image.hAlign = "LEFT"
    return image


def create_result_block(
    result: AnalysisResult,
    styles,
    screenshot_loader: Optional[ScreenshotLoader] = None,
    max_dimension: int = 1600,
) -> list:
    """Flowables for one analyzed URL"""
    elements = [
        Paragraph(escape(truncate_url(result.url)), styles["ResultTitle"]),
        Paragraph(f"Data Source: {data_source_label(result.data_source)}", styles["MetaText"]),
    ]

    if result.error:
        elements.append(Paragraph(escape(f"Error: {result.error}"), styles["ErrorText"]))
    else:
        elements.append(create_metrics_table(result))
        elements.append(Spacer(1, 2 * mm))

        if result.screenshot_url and screenshot_loader:
            preview = create_preview(result.screenshot_url, screenshot_loader, max_dimension)
            if preview is not None:
                elements.append(Paragraph("Preview:", styles["MetaText"]))
                elements.append(preview)
                elements.append(Spacer(1, 2 * mm))

        elements.append(
            Paragraph(
                f"Analyzed: {escape(format_timestamp(result.analyzed_at))}", styles["MetaText"]
            )
        )

    elements.append(Spacer(1, 8 * mm))
    return elements


def build_report_blocks(
    results: List[AnalysisResult],
    styles,
    screenshot_loader: Optional[ScreenshotLoader] = None,
    max_dimension: int = 1600,
) -> List[KeepTogether]:
    """One KeepTogether block per result, in input order"""
    return [
        KeepTogether(create_result_block(result, styles, screenshot_loader, max_dimension))
        for result in results
    ]


def generate_pdf(
    results: List[AnalysisResult],
    output_path=None,
    screenshot_loader: Optional[ScreenshotLoader] = None,
    max_dimension: int = 1600,
):
    """
    Generate the complete PDF report

    Args:
        results: Analysis results to render, one block each
        output_path: Optional file path to save PDF. If None, returns BytesIO buffer
        screenshot_loader: Callable mapping a result's screenshot reference to
            image bytes (or None). Screenshots are skipped when omitted.
        max_dimension: Maximum pixel dimension of embedded screenshots

    Returns:
        BytesIO buffer if output_path is None, otherwise None (saves to file)
    """
    pdf_file = output_path if output_path else io.BytesIO()

    doc = SimpleDocTemplate(
        pdf_file,
        pagesize=A4,
        rightMargin=PAGE_MARGIN,
        leftMargin=PAGE_MARGIN,
        topMargin=PAGE_MARGIN,
        bottomMargin=20 * mm,
        title="Link Traffic Analysis Report",
    )

    styles = create_custom_styles()

    elements = [
        Paragraph("Link Traffic Analysis Report", styles["ReportTitle"]),
        Paragraph(
            f"Generated: {datetime.now().strftime('%m/%d/%Y, %H:%M:%S')}",
            styles["ReportSubtitle"],
        ),
    ]
    elements.extend(build_report_blocks(results, styles, screenshot_loader, max_dimension))

    doc.build(elements, canvasmaker=NumberedCanvas)

    if output_path:
        logger.info(f"✅ PDF report created: {output_path}")
        return None

    pdf_file.seek(0)
    return pdf_file
