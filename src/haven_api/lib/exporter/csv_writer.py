"""CSV export encoder, one table per content type."""

import csv
import io
import uuid
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import Any

from haven_api.lib.exporter.json_writer import dumps
from haven_api.lib.exporter.types import EncodedPayload

# Characters that trigger formula execution in spreadsheet applications
_FORMULA_PREFIXES = ("=", "+", "-", "@", "\t", "\r")


def _sanitize_cell(value: object) -> object:
    """Sanitize a cell value to prevent CSV formula injection.

    Prefixes values starting with formula-triggering characters with
    a single quote to prevent execution in spreadsheet applications.
    """
    if isinstance(value, str) and value and value[0] in _FORMULA_PREFIXES:
        return f"'{value}"
    return value


def _cell(value: object) -> object:
    """Flatten a record value into something a flat table can hold.

    Nested dicts and lists (references, media, tags) become JSON text.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (dict, list, tuple)):
        return dumps(value)
    return _sanitize_cell(value)


def encode_table(records: Sequence[Mapping[str, Any]]) -> bytes:
    """Encode records as a CSV table.

    The header is the key set of the first record; keys missing from later
    records are left blank and extra keys are dropped.
    """
    if not records:
        return b""
    fields = list(records[0].keys())
    buffer = io.StringIO(newline="")
    writer = csv.DictWriter(buffer, fieldnames=fields, extrasaction="ignore", restval="")
    writer.writeheader()
    for record in records:
        writer.writerow({key: _cell(value) for key, value in record.items()})
    return buffer.getvalue().encode("utf-8")


def encode_csv(
    result_map: Mapping[str, Sequence[Mapping[str, Any]]],
    *,
    file_name: str,
) -> list[EncodedPayload]:
    """Encode each non-empty content type as its own ``{content_type}.csv``.

    Args:
        result_map: Content type -> records.
        file_name: Artifact base name, used only when nothing matched.

    Returns:
        One payload per non-empty content type, or a single empty
        ``{file_name}.csv`` payload when there were no records at all.
    """
    payloads = [
        EncodedPayload(name=f"{content_type}.csv", data=encode_table(records))
        for content_type, records in result_map.items()
        if records
    ]
    if not payloads:
        return [EncodedPayload(name=f"{file_name}.csv", data=b"")]
    return payloads
