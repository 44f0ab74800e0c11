"""Firestore record store for analysed bills and the running discount total."""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional

import firebase_admin
from firebase_admin import credentials, firestore
from firebase_admin.exceptions import FirebaseError
from google.api_core.exceptions import GoogleAPIError

from .expense_extract import ExpenseExtraction
from .settings import Settings

LOGGER = logging.getLogger(__name__)

JsonDict = Dict[str, Any]


class RecordStoreError(RuntimeError):
    """Raised when Firestore operations fail."""


@lru_cache()
def _client(settings: Settings) -> Any:
    try:
        app = firebase_admin.get_app()
    except ValueError:
        try:
            cert = credentials.Certificate(settings.firebase_credentials)
        except (OSError, ValueError) as exc:
            LOGGER.error("Unable to load Firebase credentials from %s: %s", settings.firebase_credentials, exc)
            raise RecordStoreError("invalid_credentials") from exc
        app = firebase_admin.initialize_app(cert)
    return firestore.client(app)


def generate_bill_id() -> str:
    return uuid.uuid4().hex


def build_bill_record(extraction: ExpenseExtraction, timestamp: Optional[datetime] = None) -> JsonDict:
    moment = timestamp or datetime.now(timezone.utc)
    return {
        "vendor_name": extraction.summary.vendor_name,
        "items": extraction.items_as_dicts(),
        "total": extraction.summary.total,
        "date": moment.isoformat(),
    }


def save_bill(bill_id: str, record: Mapping[str, Any], *, settings: Settings) -> str:
    """Write ``record`` to the bills collection under ``bill_id``."""

    try:
        _client(settings).collection(settings.bills_collection).document(bill_id).set(dict(record))
    except (GoogleAPIError, FirebaseError) as exc:
        LOGGER.error("Error adding document %s: %s", bill_id, exc)
        raise RecordStoreError("bill_write_failed") from exc
    LOGGER.info("Document written with ID: %s", bill_id)
    return bill_id


def increment_aggregate(amount: Decimal, *, settings: Settings) -> None:
    """Atomically add ``amount`` to the running aggregate counter."""

    document = _client(settings).collection(settings.stats_collection).document(settings.stats_document)
    try:
        document.set({settings.stats_field: firestore.Increment(float(amount))}, merge=True)
    except (GoogleAPIError, FirebaseError) as exc:
        LOGGER.error("Error incrementing %s: %s", settings.stats_field, exc)
        raise RecordStoreError("aggregate_update_failed") from exc
    LOGGER.info(
        "Incremented %s/%s.%s by %s",
        settings.stats_collection,
        settings.stats_document,
        settings.stats_field,
        amount,
    )


__all__ = [
    "RecordStoreError",
    "build_bill_record",
    "generate_bill_id",
    "increment_aggregate",
    "save_bill",
]
