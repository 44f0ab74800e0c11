from __future__ import annotations

from typing import Any, Dict, List

import pytest

from bill_analyzer.analysis import parse_analysis_result
from bill_analyzer.errors import MalformedInput
from bill_analyzer.expense_extract import extract_expense
from bill_analyzer.main import HTTPException, extract


def _field(type_text: str, value: str) -> Dict[str, Any]:
    return {
        "Type": {"Text": type_text, "Confidence": 99.1},
        "ValueDetection": {"Text": value, "Confidence": 98.7},
    }


def _document(summary: List[Dict[str, Any]], items: List[List[Dict[str, Any]]]) -> Dict[str, Any]:
    return {
        "ExpenseIndex": 1,
        "SummaryFields": summary,
        "LineItemGroups": [
            {
                "LineItemGroupIndex": 1,
                "LineItems": [{"LineItemExpenseFields": fields} for fields in items],
            }
        ],
    }


def test_end_to_end_single_document() -> None:
    response = {
        "ExpenseDocuments": [
            _document(
                [_field("VENDOR_NAME", "Joe's\nDiner"), _field("TOTAL", "45.00")],
                [[_field("ITEM", "Burger"), _field("PRICE", "10.00"), _field("QUANTITY", "2")]],
            )
        ]
    }

    extraction = extract_expense(response)

    assert extraction.summary.to_dict() == {"vendor_name": "Joe's Diner", "total": "45.00"}
    assert extraction.items_as_dicts() == [{"item": "Burger", "price": "10.00", "quantity": "2"}]


def test_defaults_when_no_recognised_summary_fields() -> None:
    response = {
        "ExpenseDocuments": [
            _document([_field("INVOICE_RECEIPT_DATE", "2024-01-02"), _field("TAX", "1.20")], [])
        ]
    }

    extraction = extract_expense(response)

    assert extraction.summary.to_dict() == {"vendor_name": "N/A", "total": "0"}
    assert extraction.line_items == []


def test_empty_document_list_yields_defaults() -> None:
    extraction = extract_expense({"ExpenseDocuments": []})
    assert extraction.to_dict() == {"vendor_name": "N/A", "total": "0", "items": []}


def test_last_vendor_name_wins_across_documents() -> None:
    response = {
        "ExpenseDocuments": [
            _document([_field("VENDOR_NAME", "First"), _field("VENDOR_NAME", "Second")], []),
            _document([_field("TOTAL", "9.99"), _field("VENDOR_NAME", "Third\nStore\nInc")], []),
        ]
    }

    summary = extract_expense(response).summary

    assert summary.vendor_name == "Third Store Inc"
    assert summary.total == "9.99"


def test_total_newlines_are_replaced() -> None:
    response = {"ExpenseDocuments": [_document([_field("TOTAL", "$12.00\nUSD")], [])]}
    assert extract_expense(response).summary.total == "$12.00 USD"


def test_partial_line_items_keep_missing_keys_absent() -> None:
    response = {
        "ExpenseDocuments": [
            _document(
                [],
                [
                    [_field("PRICE", "3.50")],
                    [_field("ITEM", "Large\nCoffee"), _field("EXPENSE_ROW", "Large Coffee 3.50")],
                    [],
                ],
            )
        ]
    }

    items = extract_expense(response).items_as_dicts()

    assert items == [{"price": "3.50"}, {"item": "Large Coffee"}, {}]


def test_price_and_quantity_are_kept_raw() -> None:
    response = {
        "ExpenseDocuments": [
            _document([], [[_field("PRICE", "1.00\nEA"), _field("QUANTITY", "2\nx")]])
        ]
    }
    assert extract_expense(response).items_as_dicts() == [{"price": "1.00\nEA", "quantity": "2\nx"}]


def test_line_items_follow_document_order() -> None:
    response = {
        "ExpenseDocuments": [
            _document([], [[_field("ITEM", "a")], [_field("ITEM", "b")]]),
            _document([], [[_field("ITEM", "c")]]),
        ]
    }
    assert [item["item"] for item in extract_expense(response).items_as_dicts()] == ["a", "b", "c"]


def test_extraction_is_repeatable() -> None:
    response = {
        "ExpenseDocuments": [
            _document(
                [_field("VENDOR_NAME", "Shop"), _field("TOTAL", "5")],
                [[_field("ITEM", "Tea"), _field("PRICE", "5")]],
            )
        ]
    }
    assert extract_expense(response) == extract_expense(response)


def test_accepts_parsed_result() -> None:
    response = {"ExpenseDocuments": [_document([_field("VENDOR_NAME", "Shop")], [])]}
    parsed = parse_analysis_result(response)
    assert extract_expense(parsed).summary.vendor_name == "Shop"


def test_group_types_are_parsed() -> None:
    summary_field = _field("NAME", "Joe")
    summary_field["GroupProperties"] = [{"Types": ["VENDOR"], "Id": "abc"}]
    parsed = parse_analysis_result({"ExpenseDocuments": [_document([summary_field], [])]})
    assert parsed.documents[0].summary_fields[0].group_types == ("VENDOR",)


def test_missing_value_detection_reads_as_empty() -> None:
    response = {"ExpenseDocuments": [_document([{"Type": {"Text": "VENDOR_NAME"}}], [])]}
    assert extract_expense(response).summary.vendor_name == ""


def _with_group_properties(group_properties: Any) -> Dict[str, Any]:
    summary_field = _field("NAME", "Joe")
    summary_field["GroupProperties"] = group_properties
    return {"ExpenseDocuments": [_document([summary_field], [])]}


@pytest.mark.parametrize(
    "response,path",
    [
        ({}, "$"),
        ({"ExpenseDocuments": [{"LineItemGroups": []}]}, "$.ExpenseDocuments[0]"),
        ({"ExpenseDocuments": [{"SummaryFields": []}]}, "$.ExpenseDocuments[0]"),
        (
            {"ExpenseDocuments": [{"SummaryFields": [], "LineItemGroups": [{}]}]},
            "$.ExpenseDocuments[0].LineItemGroups[0]",
        ),
        (
            {"ExpenseDocuments": [{"SummaryFields": [{"ValueDetection": {"Text": "x"}}], "LineItemGroups": []}]},
            "$.ExpenseDocuments[0].SummaryFields[0]",
        ),
        (_with_group_properties(5), "$.ExpenseDocuments[0].SummaryFields[0]"),
        (_with_group_properties([7]), "$.ExpenseDocuments[0].SummaryFields[0].GroupProperties[0]"),
        (_with_group_properties([{"Types": 7}]), "$.ExpenseDocuments[0].SummaryFields[0].GroupProperties[0]"),
        (
            _with_group_properties([{"Types": "VENDOR"}]),
            "$.ExpenseDocuments[0].SummaryFields[0].GroupProperties[0]",
        ),
    ],
)
def test_malformed_input_is_reported(response: Dict[str, Any], path: str) -> None:
    with pytest.raises(MalformedInput) as exc:
        extract_expense(response)
    assert exc.value.path == path


def test_malformed_later_document_produces_nothing() -> None:
    response = {
        "ExpenseDocuments": [
            _document([_field("VENDOR_NAME", "Valid")], [[_field("ITEM", "x")]]),
            {"SummaryFields": []},
        ]
    }
    with pytest.raises(MalformedInput):
        extract_expense(response)


@pytest.mark.asyncio
async def test_extract_endpoint_rejects_bad_group_properties() -> None:
    with pytest.raises(HTTPException) as exc:
        await extract(_with_group_properties(5))
    assert exc.value.status_code == 422
    assert exc.value.detail == "malformed_analysis"
