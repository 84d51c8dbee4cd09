"""Exporter library — format encoders, zip packager, and artifact writer.

Public API:
    - encode_export: Encode a content-type -> records map in a given format
    - write_artifact: Persist encoded payloads as one durable file
    - pack_archive: Zip packager used for compressed/multi-payload artifacts
    - remove_artifact: Delete an artifact and its per-job directory
    - SUPPORTED_FORMATS / FORMAT_EXTENSIONS / FORMAT_MEDIA_TYPES / FORMATS
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from haven_api.lib.exporter.archive import pack_archive
from haven_api.lib.exporter.artifact import (
    ARCHIVE_EXTENSION,
    artifact_path,
    needs_archive,
    remove_artifact,
    write_artifact,
)
from haven_api.lib.exporter.csv_writer import encode_csv
from haven_api.lib.exporter.json_writer import encode_json
from haven_api.lib.exporter.types import ArtifactResult, EncodedPayload
from haven_api.lib.exporter.xml_writer import encode_xml

# Format registry mapping format names to encoder functions
_ENCODERS: dict[str, Callable[..., list[EncodedPayload]]] = {
    "json": encode_json,
    "csv": encode_csv,
    "xml": encode_xml,
}

SUPPORTED_FORMATS = list(_ENCODERS.keys())

FORMAT_EXTENSIONS: dict[str, str] = {
    "json": ".json",
    "csv": ".csv",
    "xml": ".xml",
}

FORMAT_MEDIA_TYPES: dict[str, str] = {
    "json": "application/json",
    "csv": "text/csv",
    "xml": "application/xml",
    "zip": "application/zip",
}


@dataclass(frozen=True)
class FormatInfo:
    """Display metadata for one export format."""

    id: str
    name: str
    description: str
    extension: str
    supports_compression: bool = True


FORMATS: tuple[FormatInfo, ...] = (
    FormatInfo("json", "JSON", "Structured data format, best for data migration", ".json"),
    FormatInfo("csv", "CSV", "Spreadsheet format, best for analysis", ".csv"),
    FormatInfo("xml", "XML", "Markup format, best for system integration", ".xml"),
)


def encode_export(
    result_map: Mapping[str, Sequence[Mapping[str, Any]]],
    output_format: str,
    *,
    file_name: str,
) -> list[EncodedPayload]:
    """Encode extracted records in the requested format.

    Args:
        result_map: Content type -> records, in selection order.
        output_format: One of SUPPORTED_FORMATS.
        file_name: Artifact base name used to name whole-export payloads.

    Returns:
        One or more named payloads.

    Raises:
        ValueError: If the format is not supported.
    """
    encoder = _ENCODERS.get(output_format)
    if encoder is None:
        msg = f"Unsupported format: {output_format}. Supported: {SUPPORTED_FORMATS}"
        raise ValueError(msg)
    return encoder(result_map, file_name=file_name)


__all__ = [
    "ARCHIVE_EXTENSION",
    "FORMATS",
    "FORMAT_EXTENSIONS",
    "FORMAT_MEDIA_TYPES",
    "SUPPORTED_FORMATS",
    "ArtifactResult",
    "EncodedPayload",
    "FormatInfo",
    "artifact_path",
    "encode_csv",
    "encode_export",
    "encode_json",
    "encode_xml",
    "needs_archive",
    "pack_archive",
    "remove_artifact",
    "write_artifact",
]
