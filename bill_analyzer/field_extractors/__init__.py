"""Field extraction helpers for structured expense analysis data."""
from .discount import derive_discount, extract_numeric_total
from .line_items import LineItemRecord, extract_line_items
from .summary import SummaryRecord, extract_summary

__all__ = [
    "LineItemRecord",
    "SummaryRecord",
    "derive_discount",
    "extract_line_items",
    "extract_numeric_total",
    "extract_summary",
]
