# Reporting subpackage - Excel and PDF exports of analysis results
from .common import data_source_label, display_rank, format_timestamp
from .excel import generate_excel
from .pdf import generate_pdf, register_fonts

__all__ = [
    "data_source_label",
    "display_rank",
    "format_timestamp",
    "generate_excel",
    "generate_pdf",
    "register_fonts",
]
