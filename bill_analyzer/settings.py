"""Application settings management for the bill analysis service."""
from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    aws_region: str
    s3_bucket_name: str
    aws_access_key_id: Optional[str]
    aws_secret_access_key: Optional[str]
    firebase_credentials: str
    bills_collection: str
    stats_collection: str
    stats_document: str
    stats_field: str
    discount_rate: Decimal
    discount_aggregate_enabled: bool
    max_upload_bytes: int
    port: int

    @staticmethod
    def _require_env(name: str) -> str:
        value = os.getenv(name)
        if value is None or not value.strip():
            raise RuntimeError(f"Environment variable {name} is required")
        return value.strip()

    @staticmethod
    def _optional_env(name: str, default: Optional[str] = None) -> Optional[str]:
        value = os.getenv(name)
        if value is None or not value.strip():
            return default
        return value.strip()

    @classmethod
    def _bool_env(cls, name: str, default: bool) -> bool:
        raw = cls._optional_env(name)
        if raw is None:
            return default
        lowered = raw.lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise RuntimeError(f"{name} must be a boolean, got {raw!r}")

    @classmethod
    def _int_env(cls, name: str, default: int) -> int:
        raw = cls._optional_env(name)
        if raw is None:
            return default
        try:
            value = int(raw)
        except ValueError as exc:
            raise RuntimeError(f"{name} must be an integer, got {raw!r}") from exc
        if value <= 0:
            raise RuntimeError(f"{name} must be positive")
        return value

    @classmethod
    def load(cls) -> "Settings":
        _ensure_env_file_loaded()
        aws_region = cls._require_env("AWS_REGION")
        bucket = cls._require_env("S3_BUCKET_NAME")

        raw_rate = cls._optional_env("DISCOUNT_RATE", "0.10")
        try:
            discount_rate = Decimal(raw_rate)
        except InvalidOperation as exc:
            raise RuntimeError(f"DISCOUNT_RATE must be a decimal number, got {raw_rate!r}") from exc
        if not discount_rate.is_finite() or discount_rate < 0:
            raise RuntimeError("DISCOUNT_RATE must be a non-negative number")

        return cls(
            aws_region=aws_region,
            s3_bucket_name=bucket,
            aws_access_key_id=cls._optional_env("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=cls._optional_env("AWS_SECRET_ACCESS_KEY"),
            firebase_credentials=cls._optional_env("FIREBASE_CREDENTIALS", "serviceAccount.json"),
            bills_collection=cls._optional_env("BILLS_COLLECTION", "bills"),
            stats_collection=cls._optional_env("STATS_COLLECTION", "data"),
            stats_document=cls._optional_env("STATS_DOCUMENT", "stats"),
            stats_field=cls._optional_env("STATS_FIELD", "count"),
            discount_rate=discount_rate,
            discount_aggregate_enabled=cls._bool_env("DISCOUNT_AGGREGATE_ENABLED", True),
            max_upload_bytes=cls._int_env("MAX_UPLOAD_MB", 50) * 1024 * 1024,
            port=cls._int_env("PORT", 3000),
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings.load()


def reset_settings_state() -> None:
    """Reset cached settings and environment file state (for tests)."""
    global _ENV_FILE_LOADED
    _ENV_FILE_LOADED = False
    get_settings.cache_clear()


_ENV_FILE_LOADED = False


def _ensure_env_file_loaded() -> None:
    global _ENV_FILE_LOADED
    if _ENV_FILE_LOADED:
        return
    candidates = [Path.cwd() / ".env", Path(__file__).resolve().parent.parent / ".env"]
    loaded = False
    for env_path in candidates:
        if env_path.exists():
            load_dotenv(dotenv_path=env_path, override=False)
            loaded = True
    if not loaded:
        load_dotenv(override=False)
    _ENV_FILE_LOADED = True


__all__ = ["Settings", "get_settings", "reset_settings_state"]
