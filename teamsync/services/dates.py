# teamsync/services/dates.py
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DISPLAY_DATE = re.compile(r"^(\d{1,2})[-/](\d{1,2})[-/](\d{4})$")


def format_display_date(value: Optional[str]) -> str:
    """
    Render a YYYY-MM-DD date or an ISO-8601 timestamp as DD-MM-YYYY.

    Returns an empty string for empty or unparseable input. Timestamps are
    truncated to their calendar date.
    """
    if not value:
        return ""
    text = str(value).strip()
    if _ISO_DATE.match(text):
        try:
            parsed = date.fromisoformat(text)
        except ValueError:
            return ""
        return parsed.strftime("%d-%m-%Y")
    try:
        parsed_dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return ""
    return parsed_dt.strftime("%d-%m-%Y")


def parse_display_date(value: Optional[str]) -> Optional[str]:
    """
    Parse DD-MM-YYYY or DD/MM/YYYY into YYYY-MM-DD.

    Returns None when the input is not in display format or is not a real
    calendar date.
    """
    if not value:
        return None
    match = _DISPLAY_DATE.match(str(value).strip())
    if match is None:
        return None
    day, month, year = (int(part) for part in match.groups())
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def normalize_date(value: Optional[str]) -> Optional[str]:
    """
    Coerce an imported date cell to canonical YYYY-MM-DD.

    Accepts display format (DD-MM-YYYY), canonical dates and ISO timestamps
    (truncated to the date). Empty input gives None; anything else raises
    ValueError.
    """
    if value is None or str(value).strip() == "":
        return None
    text = str(value).strip()
    parsed = parse_display_date(text)
    if parsed is not None:
        return parsed
    if _ISO_DATE.match(text):
        return date.fromisoformat(text).isoformat()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        raise ValueError(f"Unrecognised date '{text}'") from None
