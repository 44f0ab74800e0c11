"""Expense field extraction over Textract ``AnalyzeExpense`` results.

The extractor is a pure function of its input: it performs no I/O and keeps
no state between calls, so it is safe to run inside a request handler and
concurrently for independent requests.  The response is validated in full
before any field is read; a malformed response raises
:class:`~bill_analyzer.errors.MalformedInput` and produces no records.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Union

from .analysis import AnalysisResult, parse_analysis_result
from .field_extractors import LineItemRecord, SummaryRecord, extract_line_items, extract_summary

LOGGER = logging.getLogger(__name__)


@dataclass
class ExpenseExtraction:
    summary: SummaryRecord = field(default_factory=SummaryRecord)
    line_items: List[LineItemRecord] = field(default_factory=list)

    def items_as_dicts(self) -> List[Dict[str, str]]:
        return [record.to_dict() for record in self.line_items]

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = self.summary.to_dict()
        payload["items"] = self.items_as_dicts()
        return payload


def extract_expense(response: Union[AnalysisResult, Mapping[str, Any]]) -> ExpenseExtraction:
    """Extract the summary record and line items from an expense analysis."""

    if isinstance(response, AnalysisResult):
        result = response
    else:
        result = parse_analysis_result(response)

    extraction = ExpenseExtraction(
        summary=extract_summary(result.documents),
        line_items=extract_line_items(result.documents),
    )
    LOGGER.debug(
        "Extracted vendor=%r total=%r from %d document(s) with %d line item(s)",
        extraction.summary.vendor_name,
        extraction.summary.total,
        len(result.documents),
        len(extraction.line_items),
    )
    return extraction


__all__ = ["ExpenseExtraction", "extract_expense"]
