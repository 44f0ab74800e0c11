"""FastAPI router definitions for the bill analysis service."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from fastapi import Body, Depends, FastAPI, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from . import firestore_client, image_source, storage, textract_client
from .errors import MalformedInput, NoNumericTotal
from .expense_extract import ExpenseExtraction, extract_expense
from .field_extractors import derive_discount
from .settings import Settings, get_settings

LOGGER = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)

app = FastAPI(title="Bill Analysis Service")


class AnalyseRequest(BaseModel):
    photo: Optional[str] = None
    image_url: Optional[str] = None


class AnalyseResponse(BaseModel):
    doc_id: str
    object_key: str
    vendor_name: str
    total: str
    items: List[Dict[str, str]]
    discount: Optional[float] = None
    aggregate_updated: bool = False


class ExtractResponse(BaseModel):
    vendor_name: str
    total: str
    items: List[Dict[str, str]]


def _load_image(payload: AnalyseRequest, settings: Settings) -> bytes:
    if not payload.photo and not payload.image_url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="missing_image")
    try:
        return image_source.load_image(
            payload.photo,
            payload.image_url,
            max_bytes=settings.max_upload_bytes,
        )
    except image_source.ImageFetchError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="image_fetch_failed") from exc
    except image_source.ImageDecodeError as exc:
        detail = str(exc)
        code = (
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
            if detail == "image_too_large"
            else status.HTTP_400_BAD_REQUEST
        )
        raise HTTPException(status_code=code, detail=detail) from exc


def _upload_and_analyse(payload: AnalyseRequest, settings: Settings) -> Tuple[str, Dict[str, Any]]:
    data = _load_image(payload, settings)
    key = storage.generate_object_key()
    try:
        storage.upload_image(data, key, settings=settings)
        stored = storage.download_image(key, settings=settings)
    except storage.StorageError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="storage_failed") from exc

    try:
        response = textract_client.analyze_expense(stored, settings=settings)
    except textract_client.AnalysisServiceError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="analysis_failed") from exc
    return key, response


def _extract(response: Dict[str, Any]) -> ExpenseExtraction:
    try:
        extraction = extract_expense(response)
    except MalformedInput as exc:
        LOGGER.error("Malformed expense analysis: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="malformed_analysis"
        ) from exc
    LOGGER.info("Summary fields: %s", extraction.summary.to_dict())
    LOGGER.info("Line items: %s", extraction.items_as_dicts())
    return extraction


def _discount(total: str, settings: Settings) -> Optional[Decimal]:
    try:
        return derive_discount(total, settings.discount_rate)
    except NoNumericTotal as exc:
        LOGGER.warning("Skipping discount aggregate: %s", exc)
        return None


@app.post("/uploadAndAnalyse", response_model=AnalyseResponse)
async def upload_and_analyse(
    payload: AnalyseRequest,
    settings: Settings = Depends(get_settings),
) -> AnalyseResponse:
    key, response = await run_in_threadpool(_upload_and_analyse, payload, settings)
    extraction = _extract(response)

    doc_id = firestore_client.generate_bill_id()
    record = firestore_client.build_bill_record(extraction, datetime.now(timezone.utc))
    try:
        await run_in_threadpool(firestore_client.save_bill, doc_id, record, settings=settings)
    except firestore_client.RecordStoreError as exc:
        raise HTTPException(status_code=status.HTTP_424_FAILED_DEPENDENCY, detail="record_write_failed") from exc

    discount = _discount(extraction.summary.total, settings)
    aggregate_updated = False
    if discount is not None and settings.discount_aggregate_enabled:
        try:
            await run_in_threadpool(firestore_client.increment_aggregate, discount, settings=settings)
            aggregate_updated = True
        except firestore_client.RecordStoreError as exc:
            LOGGER.warning("Bill %s saved but aggregate was not updated: %s", doc_id, exc)

    return AnalyseResponse(
        doc_id=doc_id,
        object_key=key,
        vendor_name=extraction.summary.vendor_name,
        total=extraction.summary.total,
        items=extraction.items_as_dicts(),
        discount=float(discount) if discount is not None else None,
        aggregate_updated=aggregate_updated,
    )


@app.post("/analyse")
async def analyse(
    payload: AnalyseRequest,
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    _, response = await run_in_threadpool(_upload_and_analyse, payload, settings)
    return response


@app.post("/extract", response_model=ExtractResponse)
async def extract(response: Dict[str, Any] = Body(...)) -> ExtractResponse:
    extraction = _extract(response)
    return ExtractResponse(**extraction.to_dict())


@app.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


__all__ = ["app", "run"]
