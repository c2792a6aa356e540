"""
CSV parsing and serialization for bulk uploads and exports.
"""
import csv
import io
from typing import Any, Dict, Iterable, List, Sequence

from app.core.exceptions import TabularParseError


def decode_upload(content: bytes) -> str:
    """Decode an uploaded file, dropping a UTF-8 BOM if present."""
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise TabularParseError(f"File is not valid UTF-8: {exc}") from exc


def parse_rows(text: str) -> List[Dict[str, str]]:
    """
    Parse CSV text with a header row into a list of dicts.

    Header names are stripped; rows whose cells are all blank are skipped.
    Rows with more cells than the header are rejected.
    """
    reader = csv.DictReader(io.StringIO(text))
    rows = []
    try:
        if reader.fieldnames is None:
            return []
        reader.fieldnames = [name.strip() for name in reader.fieldnames]

        for row in reader:
            if None in row:
                raise TabularParseError(
                    f"Line {reader.line_num}: more values than header columns"
                )
            values = {key: (value or "") for key, value in row.items()}
            if not any(value.strip() for value in values.values()):
                continue
            rows.append(values)
    except csv.Error as exc:
        raise TabularParseError(f"Malformed CSV: {exc}") from exc
    return rows


def serialize_rows(columns: Sequence[str], rows: Iterable[Dict[str, Any]]) -> str:
    """Serialize rows to CSV text with a header row."""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(columns), extrasaction="ignore")
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return buffer.getvalue()
