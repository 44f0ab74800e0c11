"""Discount derivation from an extracted total."""
from __future__ import annotations

import logging
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from ..errors import NoNumericTotal

LOGGER = logging.getLogger(__name__)

NUMBER_PATTERN = re.compile(r"[+-]?\d+(?:\.\d+)?")
DEFAULT_DISCOUNT_RATE = Decimal("0.10")
CENTS = Decimal("0.01")


def extract_numeric_total(total_text: str) -> Decimal:
    """Return the first number found in ``total_text``, scanning left to right."""

    match = NUMBER_PATTERN.search(total_text or "")
    if match is None:
        raise NoNumericTotal(total_text)
    try:
        return Decimal(match.group(0))
    except InvalidOperation as exc:  # pragma: no cover - the pattern only matches valid decimals
        raise NoNumericTotal(total_text) from exc


def derive_discount(total_text: str, rate: Union[Decimal, str] = DEFAULT_DISCOUNT_RATE) -> Decimal:
    """Compute ``rate`` times the total, rounded half away from zero to cents.

    Decimal arithmetic keeps ``123.45 * 0.10`` at exactly ``12.345`` so the
    tie rounds up to ``12.35``.  Negative totals yield a zero discount.
    """

    value = extract_numeric_total(total_text) * Decimal(rate)
    if value < 0:
        LOGGER.warning("Negative total %r, discount clamped to zero", total_text)
        return Decimal("0.00")
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


__all__ = ["DEFAULT_DISCOUNT_RATE", "derive_discount", "extract_numeric_total"]
