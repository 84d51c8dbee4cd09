"""Zip archive packager for encoded export payloads."""

import zipfile
from collections.abc import Iterable
from pathlib import Path

from haven_api.lib.exporter.types import EncodedPayload

ARCHIVE_CHUNK_SIZE = 64 * 1024
ARCHIVE_COMPRESS_LEVEL = 9


def pack_archive(payloads: Iterable[EncodedPayload], output_path: Path) -> list[str]:
    """Write payloads into a deflate-compressed zip archive.

    Each payload becomes one entry named after the payload. Entry data is
    written in chunks from the payload buffer, so no second copy of the
    uncompressed data is made.

    Args:
        payloads: Encoded payloads to pack.
        output_path: Destination archive path; overwritten if it exists.

    Returns:
        Entry names in the order they were written.

    Raises:
        ValueError: If two payloads share a name.
        OSError: If the destination cannot be opened or written.
    """
    entries: list[str] = []
    with zipfile.ZipFile(
        output_path,
        "w",
        compression=zipfile.ZIP_DEFLATED,
        compresslevel=ARCHIVE_COMPRESS_LEVEL,
    ) as zf:
        for payload in payloads:
            if payload.name in entries:
                msg = f"Duplicate archive entry: {payload.name}"
                raise ValueError(msg)
            view = memoryview(payload.data)
            with zf.open(payload.name, "w") as entry:
                for offset in range(0, len(view), ARCHIVE_CHUNK_SIZE):
                    entry.write(view[offset : offset + ARCHIVE_CHUNK_SIZE])
            entries.append(payload.name)
    return entries
