# teamsync/services/csv_io.py
from __future__ import annotations

import csv
import io
from typing import Any

LIST_SEPARATOR = ";"


class CsvFormatError(ValueError):
    """
    Raised when an uploaded file is empty or has no data rows.
    """


def join_list(values: list[Any] | None) -> str:
    return LIST_SEPARATOR.join(str(v) for v in (values or []))


def split_list(value: Any) -> list[str]:
    """
    Rebuild a list field from its semicolon-joined export form.
    """
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    return [part.strip() for part in str(value).split(LIST_SEPARATOR) if part.strip()]


def write_csv(rows: list[dict[str, Any]]) -> str:
    """
    Serialize flattened rows; the header comes from the first row's keys.

    Fields containing commas, quotes or newlines are quoted, quotes are
    doubled, lines end with CRLF. None renders as an empty cell.
    """
    if not rows:
        return ""
    header = list(rows[0].keys())
    buffer = io.StringIO()
    writer = csv.DictWriter(
        buffer,
        fieldnames=header,
        extrasaction="ignore",
        lineterminator="\r\n",
        quoting=csv.QUOTE_MINIMAL,
    )
    writer.writeheader()
    for row in rows:
        writer.writerow({key: "" if row.get(key) is None else row.get(key) for key in header})
    return buffer.getvalue()


def read_csv(text: str) -> list[dict[str, str]]:
    """
    Parse CSV text into header-keyed rows of strings. No type coercion.

    Blank lines are skipped; missing trailing cells read as "".
    """
    if not text or not text.strip():
        raise CsvFormatError("File is empty or could not be read.")

    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")))
    try:
        header = [h.strip() for h in next(reader)]
    except StopIteration:
        raise CsvFormatError("File is empty or could not be read.") from None

    rows: list[dict[str, str]] = []
    for values in reader:
        if not values or all(v.strip() == "" for v in values):
            continue
        rows.append(
            {key: (values[i].strip() if i < len(values) else "") for i, key in enumerate(header)}
        )

    if not rows:
        raise CsvFormatError("CSV must have a header row and at least one data row.")
    return rows
