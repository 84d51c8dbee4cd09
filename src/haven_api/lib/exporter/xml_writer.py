"""XML export encoder — all content types under one root element."""

import re
import xml.etree.ElementTree as ET
from collections.abc import Mapping, Sequence
from datetime import UTC, date, datetime
from typing import Any

from haven_api.lib.exporter.types import EncodedPayload

ROOT_ELEMENT = "havenWordChurchExport"
ITEM_ELEMENT = "item"
FORMAT_VERSION = "1.0.0"

_INVALID_NAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]")
# Characters outside the XML 1.0 Char production
_INVALID_TEXT_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def _element_name(key: object) -> str:
    """Turn a record key into a valid XML element name."""
    name = _INVALID_NAME_CHARS.sub("_", str(key)) or "_"
    if not (name[0].isalpha() or name[0] == "_") or name.lower().startswith("xml"):
        name = f"_{name}"
    return name


def _text(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return _INVALID_TEXT_CHARS.sub("\ufffd", str(value))


def _append_value(parent: ET.Element, tag: str, value: Any) -> None:
    element = ET.SubElement(parent, tag)
    if value is None:
        return
    if isinstance(value, Mapping):
        for key, child in value.items():
            _append_value(element, _element_name(key), child)
    elif isinstance(value, (list, tuple)):
        for child in value:
            _append_value(element, ITEM_ELEMENT, child)
    else:
        element.text = _text(value)


def build_document(
    result_map: Mapping[str, Sequence[Mapping[str, Any]]],
    *,
    exported_at: datetime | None = None,
) -> ET.Element:
    """Build the export element tree.

    Layout::

        <havenWordChurchExport>
          <metadata><exportedAt/><version/><contentTypes/></metadata>
          <content><blogs><item>...</item></blogs>...</content>
        </havenWordChurchExport>
    """
    root = ET.Element(ROOT_ELEMENT)
    metadata = ET.SubElement(root, "metadata")
    ET.SubElement(metadata, "exportedAt").text = (exported_at or datetime.now(UTC)).isoformat()
    ET.SubElement(metadata, "version").text = FORMAT_VERSION
    ET.SubElement(metadata, "contentTypes").text = ",".join(result_map.keys())

    content = ET.SubElement(root, "content")
    for content_type, records in result_map.items():
        _append_value(content, _element_name(content_type), list(records))
    return root


def encode_xml(
    result_map: Mapping[str, Sequence[Mapping[str, Any]]],
    *,
    file_name: str,
    exported_at: datetime | None = None,
) -> list[EncodedPayload]:
    """Encode every content type into one pretty-printed XML document.

    Args:
        result_map: Content type -> records.
        file_name: Artifact base name; the payload is ``{file_name}.xml``.
        exported_at: Timestamp for the metadata block; defaults to now.

    Returns:
        A one-element payload list.
    """
    root = build_document(result_map, exported_at=exported_at)
    ET.indent(root, space="  ")
    data = ET.tostring(root, encoding="utf-8", xml_declaration=True)
    return [EncodedPayload(name=f"{file_name}.xml", data=data)]
