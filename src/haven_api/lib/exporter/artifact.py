"""Durable artifact writer."""

import asyncio
import contextlib
from collections.abc import Sequence
from pathlib import Path

import aiofiles
import aiofiles.os

from haven_api.lib.exporter.archive import pack_archive
from haven_api.lib.exporter.types import ArtifactResult, EncodedPayload

ARCHIVE_EXTENSION = ".zip"


def needs_archive(payloads: Sequence[EncodedPayload], *, compress: bool) -> bool:
    """Whether the payloads must be packaged into a zip.

    Several payloads (multi-type CSV) can only form a single artifact as an
    archive, so they are zipped even when compression was not requested.
    """
    return compress or len(payloads) > 1


def artifact_path(output_dir: Path, file_name: str, extension: str, *, archived: bool) -> Path:
    """Path of the artifact ``{file_name}{extension}`` inside ``output_dir``."""
    return output_dir / f"{file_name}{ARCHIVE_EXTENSION if archived else extension}"


async def write_artifact(
    payloads: Sequence[EncodedPayload],
    output_dir: Path,
    file_name: str,
    extension: str,
    *,
    compress: bool,
) -> ArtifactResult:
    """Write encoded payloads to a single durable artifact.

    Args:
        payloads: Encoder output.
        output_dir: Directory to write into; created if missing.
        file_name: Artifact base name.
        extension: Native extension of the export format (e.g. ``.json``).
        compress: Whether the caller asked for a zip.

    Returns:
        ArtifactResult describing the written file.

    Raises:
        OSError: If the directory or file cannot be written.
    """
    await aiofiles.os.makedirs(output_dir, exist_ok=True)
    archived = needs_archive(payloads, compress=compress)
    output_path = artifact_path(output_dir, file_name, extension, archived=archived)

    if archived:
        entries = await asyncio.to_thread(pack_archive, payloads, output_path)
    else:
        data = payloads[0].data if payloads else b""
        async with aiofiles.open(output_path, "wb") as f:
            await f.write(data)
        entries = [output_path.name]

    stat = await aiofiles.os.stat(output_path)
    return ArtifactResult(
        output_path=output_path,
        file_size_bytes=stat.st_size,
        archived=archived,
        entries=entries,
    )


async def remove_artifact(path: Path) -> bool:
    """Delete an artifact, then its per-job directory if that is now empty.

    Returns:
        False if the file was already gone, True if it was removed.

    Raises:
        OSError: If the file exists but cannot be removed.
    """
    try:
        await aiofiles.os.remove(path)
    except FileNotFoundError:
        return False
    with contextlib.suppress(OSError):
        await aiofiles.os.rmdir(path.parent)
    return True
