"""Line item extraction."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from ..analysis import ExpenseDocument, LineItem
from .summary import normalise_text


@dataclass
class LineItemRecord:
    item: Optional[str] = None
    price: Optional[str] = None
    quantity: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        # Absent keys mean "unknown"; they are never defaulted.
        payload: Dict[str, str] = {}
        if self.item is not None:
            payload["item"] = self.item
        if self.price is not None:
            payload["price"] = self.price
        if self.quantity is not None:
            payload["quantity"] = self.quantity
        return payload


def _build_record(line_item: LineItem) -> LineItemRecord:
    record = LineItemRecord()
    for item_field in line_item.fields:
        if item_field.type_text == "ITEM":
            record.item = normalise_text(item_field.value_text)
        elif item_field.type_text == "PRICE":
            record.price = item_field.value_text
        elif item_field.type_text == "QUANTITY":
            record.quantity = item_field.value_text
    return record


def extract_line_items(documents: Iterable[ExpenseDocument]) -> List[LineItemRecord]:
    """Return one record per line item, in document, group and item order."""

    records: List[LineItemRecord] = []
    for document in documents:
        for group in document.line_item_groups:
            for line_item in group.line_items:
                records.append(_build_record(line_item))
    return records


__all__ = ["LineItemRecord", "extract_line_items"]
