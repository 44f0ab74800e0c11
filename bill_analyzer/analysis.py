"""Typed view of a Textract ``AnalyzeExpense`` response.

Textract returns a deeply nested, loosely typed JSON document.  The extractor
only needs a small part of it, so this module walks the response once,
checks that the containers the extractor relies on are present and builds a
handful of small dataclasses from them.  Anything structurally wrong is
reported as :class:`~bill_analyzer.errors.MalformedInput` before any field is
extracted, so callers never see a partially processed result.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from .errors import MalformedInput


@dataclass(frozen=True)
class SummaryField:
    type_text: str
    value_text: str
    group_types: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LineItemField:
    type_text: str
    value_text: str


@dataclass(frozen=True)
class LineItem:
    fields: Tuple[LineItemField, ...]


@dataclass(frozen=True)
class LineItemGroup:
    line_items: Tuple[LineItem, ...]


@dataclass(frozen=True)
class ExpenseDocument:
    summary_fields: Tuple[SummaryField, ...]
    line_item_groups: Tuple[LineItemGroup, ...]


@dataclass(frozen=True)
class AnalysisResult:
    documents: Tuple[ExpenseDocument, ...] = field(default_factory=tuple)


def _require_list(container: Mapping[str, Any], key: str, path: str) -> Sequence[Any]:
    value = container.get(key)
    if value is None:
        raise MalformedInput(f"missing {key}", path=path)
    if not isinstance(value, list):
        raise MalformedInput(f"{key} is not a list", path=path)
    return value


def _require_mapping(value: Any, path: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise MalformedInput("expected an object", path=path)
    return value


def _detection_text(node: Mapping[str, Any], key: str) -> Optional[str]:
    detection = node.get(key)
    if not isinstance(detection, Mapping):
        return None
    text = detection.get("Text")
    if text is None:
        return None
    return text if isinstance(text, str) else str(text)


def _type_text(node: Mapping[str, Any], path: str) -> str:
    text = _detection_text(node, "Type")
    if text is None:
        raise MalformedInput("missing Type.Text", path=path)
    return text


def _group_types(node: Mapping[str, Any], path: str) -> Tuple[str, ...]:
    if node.get("GroupProperties") is None:
        return ()
    types: List[str] = []
    for index, group in enumerate(_require_list(node, "GroupProperties", path)):
        group_path = f"{path}.GroupProperties[{index}]"
        group = _require_mapping(group, group_path)
        if group.get("Types") is None:
            continue
        types.extend(str(item) for item in _require_list(group, "Types", group_path))
    return tuple(types)


def _parse_summary_field(node: Any, path: str) -> SummaryField:
    node = _require_mapping(node, path)
    return SummaryField(
        type_text=_type_text(node, path),
        value_text=_detection_text(node, "ValueDetection") or "",
        group_types=_group_types(node, path),
    )


def _parse_line_item(node: Any, path: str) -> LineItem:
    node = _require_mapping(node, path)
    fields = []
    for index, raw in enumerate(_require_list(node, "LineItemExpenseFields", path)):
        field_path = f"{path}.LineItemExpenseFields[{index}]"
        raw = _require_mapping(raw, field_path)
        fields.append(
            LineItemField(
                type_text=_type_text(raw, field_path),
                value_text=_detection_text(raw, "ValueDetection") or "",
            )
        )
    return LineItem(fields=tuple(fields))


def _parse_group(node: Any, path: str) -> LineItemGroup:
    node = _require_mapping(node, path)
    items = _require_list(node, "LineItems", path)
    return LineItemGroup(
        line_items=tuple(
            _parse_line_item(item, f"{path}.LineItems[{index}]") for index, item in enumerate(items)
        )
    )


def _parse_document(node: Any, path: str) -> ExpenseDocument:
    node = _require_mapping(node, path)
    summary = _require_list(node, "SummaryFields", path)
    groups = _require_list(node, "LineItemGroups", path)
    return ExpenseDocument(
        summary_fields=tuple(
            _parse_summary_field(item, f"{path}.SummaryFields[{index}]")
            for index, item in enumerate(summary)
        ),
        line_item_groups=tuple(
            _parse_group(group, f"{path}.LineItemGroups[{index}]") for index, group in enumerate(groups)
        ),
    )


def parse_analysis_result(response: Mapping[str, Any]) -> AnalysisResult:
    """Build an :class:`AnalysisResult` from a raw ``AnalyzeExpense`` response.

    Raises :class:`MalformedInput` when ``ExpenseDocuments`` or any of the
    nested ``SummaryFields``/``LineItemGroups``/``LineItems``/
    ``LineItemExpenseFields`` lists is missing, or when a field has no
    ``Type.Text``.  A missing ``ValueDetection`` is read as an empty value.
    """

    response = _require_mapping(response, "$")
    documents = _require_list(response, "ExpenseDocuments", "$")
    return AnalysisResult(
        documents=tuple(
            _parse_document(document, f"$.ExpenseDocuments[{index}]")
            for index, document in enumerate(documents)
        )
    )


__all__ = [
    "AnalysisResult",
    "ExpenseDocument",
    "LineItem",
    "LineItemField",
    "LineItemGroup",
    "SummaryField",
    "parse_analysis_result",
]
