"""Exporter data types."""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class EncodedPayload:
    """One named, fully encoded output of a format encoder.

    ``name`` is the file/archive entry name including its extension.
    """

    name: str
    data: bytes

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass
class ArtifactResult:
    """The durable file produced from a set of payloads."""

    output_path: Path
    file_size_bytes: int
    archived: bool
    entries: list[str] = field(default_factory=list)
