"""Contact link helpers for listing detail pages."""
from __future__ import annotations

import re
from urllib.parse import quote

_NON_DIGIT_RE = re.compile(r"\D")


def normalize_phone(number: str, country_code: str = "254") -> str:
    """Return *number* as international digits without a leading ``+``.

    A local trunk prefix ``0`` is replaced by *country_code*.
    """

    digits = _NON_DIGIT_RE.sub("", number)
    if digits.startswith("0"):
        digits = country_code + digits[1:]
    return digits


def whatsapp_link(number: str, text: str | None = None, *, country_code: str = "254") -> str:
    url = f"https://wa.me/{normalize_phone(number, country_code)}"
    if text:
        url += f"?text={quote(text)}"
    return url


def tel_link(number: str) -> str:
    return f"tel:{number.strip().replace(' ', '')}"
