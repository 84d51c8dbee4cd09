"""JSON export encoder: the whole result map as one indented document."""

import json
import uuid
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from haven_api.lib.exporter.types import EncodedPayload


class _JSONEncoder(json.JSONEncoder):
    """Custom encoder handling UUIDs, dates, and other non-serializable types."""

    def default(self, o: object) -> Any:
        if isinstance(o, uuid.UUID):
            return str(o)
        if isinstance(o, (datetime, date)):
            return o.isoformat()
        if isinstance(o, Decimal):
            return float(o)
        return super().default(o)


def dumps(value: Any, *, indent: int | None = None) -> str:
    """Serialize a value with the export encoder."""
    return json.dumps(value, cls=_JSONEncoder, indent=indent, ensure_ascii=False)


def encode_json(
    result_map: Mapping[str, Sequence[Mapping[str, Any]]],
    *,
    file_name: str,
) -> list[EncodedPayload]:
    """Encode every content type into a single JSON document.

    Args:
        result_map: Content type -> records.
        file_name: Artifact base name; the payload is ``{file_name}.json``.

    Returns:
        A one-element payload list. Empty input encodes as ``{}``.
    """
    document = {content_type: list(records) for content_type, records in result_map.items()}
    data = dumps(document, indent=2).encode("utf-8")
    return [EncodedPayload(name=f"{file_name}.json", data=data)]
