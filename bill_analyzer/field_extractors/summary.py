"""Summary field extraction (vendor name and total)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable

from ..analysis import ExpenseDocument

DEFAULT_VENDOR_NAME = "N/A"
DEFAULT_TOTAL = "0"

# Textract summary type -> SummaryRecord attribute
SUMMARY_TYPES = {
    "VENDOR_NAME": "vendor_name",
    "TOTAL": "total",
}


def normalise_text(text: str) -> str:
    """Replace every newline character with a single space."""

    return text.replace("\n", " ")


@dataclass
class SummaryRecord:
    vendor_name: str = DEFAULT_VENDOR_NAME
    total: str = DEFAULT_TOTAL

    def to_dict(self) -> Dict[str, str]:
        return {"vendor_name": self.vendor_name, "total": self.total}


def extract_summary(documents: Iterable[ExpenseDocument]) -> SummaryRecord:
    """Collect vendor name and total across every document.

    Later matches overwrite earlier ones, both within a document and across
    documents.
    """

    record = SummaryRecord()
    for document in documents:
        for summary_field in document.summary_fields:
            attribute = SUMMARY_TYPES.get(summary_field.type_text)
            if attribute is None:
                continue
            setattr(record, attribute, normalise_text(summary_field.value_text))
    return record


__all__ = ["SummaryRecord", "extract_summary", "normalise_text"]
