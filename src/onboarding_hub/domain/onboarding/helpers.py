"""Onboarding domain - cell value coercion helpers.

Workbook cells arrive as whatever pandas/openpyxl produced: strings, ints,
floats (phones typed as numbers), datetimes, bools or None. These helpers turn
them into the flat values stored in the target collections.
"""

import math
from datetime import date, datetime, timedelta
from typing import Any, Optional

import pandas as pd

# Excel day zero for serial dates (1900 date system, leap-year bug included)
EXCEL_EPOCH = datetime(1899, 12, 30)

_TRUE_STRINGS = {"true", "yes", "y", "1"}
_FALSE_STRINGS = {"false", "no", "n", "0", ""}


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return False


def to_text(value: Any) -> Optional[str]:
    """
    Render a cell as text, or None when empty.

    Integral floats lose their trailing ``.0`` so numeric phone cells keep
    their digits (``812345678.0`` -> ``"812345678"``).
    """
    if _is_missing(value):
        return None
    if isinstance(value, bool):
        return str(value).upper()
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, datetime):
        return value.isoformat()
    text = str(value).strip()
    return text or None


def text_or_empty(value: Any) -> str:
    return to_text(value) or ""


def parse_bool(value: Any) -> Optional[bool]:
    """Interpret common truthy/falsy cell spellings; None when unrecognized."""
    if _is_missing(value):
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    return None


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a date cell.

    Accepts datetime/date objects, Excel serial numbers and date strings.
    Returns None for empty or unparseable input.
    """
    if _is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)):
        try:
            return EXCEL_EPOCH + timedelta(days=float(value))
        except (OverflowError, ValueError):
            return None

    text = str(value).strip()
    if not text:
        return None
    parsed = pd.to_datetime(text, errors="coerce", dayfirst=False)
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()
