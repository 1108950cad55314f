"""Application-layer result objects."""

from __future__ import annotations

from dataclasses import dataclass

from epub_converter.errors import EpubConverterError
from epub_converter.types import StatusAction


@dataclass(frozen=True)
class ConversionResult:
    """Structured generation outcome."""

    document_id: str
    version: str
    epub_path: str
    epub_bytes: bytes
    status_cleared: bool = True

    @property
    def size_bytes(self) -> int:
        return len(self.epub_bytes)


@dataclass(frozen=True)
class StatusUpdate:
    """Outcome of a best-effort status write or delete.

    Callers log and discard it; ``error`` is never raised.
    """

    action: StatusAction
    path: str
    error: EpubConverterError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
