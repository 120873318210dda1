from __future__ import annotations

from datetime import date, datetime
import math
from typing import Any, Literal

from dateutil import parser as date_parser

EMPTY_DISPLAY = "—"
ZERO_DATE = "0000-00-00"

StatusKind = Literal["pago", "em_aberto", "vencido", "outro"]


def _parse_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date_parser.isoparse(str(value)).date()
    except (ValueError, OverflowError):
        pass
    try:
        return date_parser.parse(str(value), dayfirst=False).date()
    except (ValueError, OverflowError):
        return None


def format_currency_brl(value: Any) -> str:
    if value is None or value == "":
        return EMPTY_DISPLAY
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return str(value)
    if not math.isfinite(amount):
        return str(value)
    text = f"{abs(amount):,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    sign = "-" if amount < 0 and text != "0,00" else ""
    return f"{sign}R$ {text}"


def format_date_br(value: Any) -> str:
    if not value:
        return EMPTY_DISPLAY
    parsed = _parse_date(value)
    if parsed is None:
        return str(value)
    return parsed.strftime("%d/%m/%Y")


def normalize_status(status: str | None) -> StatusKind:
    text = (status or "").strip().lower()
    if not text:
        return "outro"
    if "pago" in text:
        return "pago"
    if "venc" in text:
        return "vencido"
    if "aberto" in text:
        return "em_aberto"
    return "outro"


def coerce_date(value: Any) -> str | None:
    """ISO ``YYYY-MM-DD`` for storage, ``None`` for empty or zero dates."""
    if value is None or value == "" or value == ZERO_DATE:
        return None
    parsed = _parse_date(value)
    return parsed.isoformat() if parsed else None


def coerce_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number or number in (float("inf"), float("-inf")) or not number.is_integer():
        return None
    return int(number)
