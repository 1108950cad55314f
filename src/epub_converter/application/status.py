"""Best-effort status records polled by clients while generation runs."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from epub_converter.application.ports import ObjectStore
from epub_converter.application.results import StatusUpdate
from epub_converter.errors import StatusDeleteError, StatusWriteError
from epub_converter.schemas import StatusRecord
from epub_converter.types import JSON_CONTENT_TYPE, StatusValue

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current UTC time truncated to whole seconds."""
    return datetime.now(UTC).replace(microsecond=0)


@dataclass(frozen=True)
class ArtifactPaths:
    """Object keys for one ``(version, document_id)`` pair."""

    status: str
    epub: str

    @classmethod
    def for_document(cls, version: str, document_id: str) -> ArtifactPaths:
        prefix = f"{version}/{document_id}"
        return cls(status=f"{prefix}.status", epub=f"{prefix}.epub")


class StatusRecorder:
    """Write and delete status records without ever raising.

    Parameters
    ----------
    store : ObjectStore
        Store holding the status records.
    clock : Callable[[], datetime] | None, default=None
        Source of ``updatedAt`` timestamps.
    """

    def __init__(self, store: ObjectStore, clock: Clock | None = None) -> None:
        self._store = store
        self._clock = clock or utc_now

    def mark_processing(self, path: str) -> StatusUpdate:
        """Record that generation has started."""
        return self._write(path, "PROCESSING")

    def mark_failed(self, path: str, message: str) -> StatusUpdate:
        """Record a terminal failure with its cause."""
        return self._write(path, "FAILED", message or "unknown error")

    def clear(self, path: str) -> StatusUpdate:
        """Delete the record after a successful publish."""
        try:
            self._store.delete_object(path)
        except Exception as exc:
            return StatusUpdate(
                action="delete",
                path=path,
                error=StatusDeleteError(f"failed to delete status {path}: {exc}"),
            )
        return StatusUpdate(action="delete", path=path)

    def _write(
        self, path: str, status: StatusValue, error: str | None = None
    ) -> StatusUpdate:
        try:
            record = StatusRecord(status=status, updated_at=self._clock(), error=error)
            self._store.put_object(path, record.to_json_bytes(), JSON_CONTENT_TYPE)
        except Exception as exc:
            return StatusUpdate(
                action="write",
                path=path,
                error=StatusWriteError(f"failed to write {status} status {path}: {exc}"),
            )
        logger.debug("Wrote %s status to %s", status, path)
        return StatusUpdate(action="write", path=path)


def log_status_update(update: StatusUpdate) -> None:
    """Log a failed status update and drop it."""
    if not update.ok:
        logger.warning("%s", update.error)
