"""Parsing of legacy free-text prices.

Older rows store ``price`` / ``rent`` as display strings such as
``"KSh 3500.0"``, ``"5000-7000"`` or ``"1,200 - 1,500 per month"``. These
helpers pull out the first one or two numbers so the value can be stored
as a structured :class:`~campus_market.models.listing.PriceRange`.
"""
from __future__ import annotations

import logging
import re
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"\d+(?:,\d{3})*(?:\.\d+)?|\.\d+")


def extract_numbers(text: str, limit: int = 2) -> list[float]:
    """Return up to *limit* numbers found in *text*, in order of appearance."""

    values: list[float] = []
    for match in _NUMBER_RE.finditer(text):
        values.append(float(match.group().replace(",", "")))
        if len(values) >= limit:
            break
    return values


def parse_price_text(text: str) -> Tuple[float, Optional[float]]:
    """Parse a legacy price string into ``(min, max)``.

    A single number yields ``(n, n)``; two numbers are ordered so that
    ``min <= max``. Raises ``ValueError`` when no number is present.
    """

    numbers = extract_numbers(text)
    if not numbers:
        raise ValueError(f"No price found in {text!r}")
    if len(numbers) == 1:
        return numbers[0], numbers[0]
    low, high = sorted(numbers)
    if numbers[0] > numbers[1]:
        logger.debug("Swapped reversed price range in %r", text)
    return low, high
