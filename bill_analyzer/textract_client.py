"""AWS Textract expense analysis client."""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .settings import Settings

LOGGER = logging.getLogger(__name__)


class AnalysisServiceError(RuntimeError):
    """Raised when Textract cannot analyse a document."""


@lru_cache()
def _textract_client(settings: Settings) -> Any:
    return boto3.client(
        "textract",
        region_name=settings.aws_region,
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
    )


def analyze_expense(data: bytes, *, settings: Settings) -> Dict[str, Any]:
    """Run ``AnalyzeExpense`` on the image bytes and return the raw response."""

    try:
        response = _textract_client(settings).analyze_expense(Document={"Bytes": data})
    except (ClientError, BotoCoreError) as exc:
        LOGGER.error("Error analysing expense: %s", exc)
        raise AnalysisServiceError("analyze_expense_failed") from exc
    LOGGER.info("Textract returned %d expense document(s)", len(response.get("ExpenseDocuments", [])))
    return response


__all__ = ["AnalysisServiceError", "analyze_expense"]
