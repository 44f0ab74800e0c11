from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bill_analyzer import settings as settings_module  # noqa: E402
from bill_analyzer.settings import Settings  # noqa: E402


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    monkeypatch.setenv("AWS_REGION", "us-east-1")
    monkeypatch.setenv("S3_BUCKET_NAME", "bills-test")
    for name in ["DISCOUNT_RATE", "DISCOUNT_AGGREGATE_ENABLED", "MAX_UPLOAD_MB", "PORT"]:
        monkeypatch.delenv(name, raising=False)
    settings_module.reset_settings_state()
    return Settings.load()
