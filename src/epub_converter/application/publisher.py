"""Publish generated EPUB artifacts."""

from __future__ import annotations

import logging

from epub_converter.application.ports import ObjectStore
from epub_converter.errors import PublishError
from epub_converter.types import EPUB_CONTENT_TYPE

logger = logging.getLogger(__name__)


class ArtifactPublisher:
    """Write EPUB bytes to the object store, overwriting earlier artifacts."""

    def __init__(self, store: ObjectStore) -> None:
        self._store = store

    def publish(self, path: str, data: bytes) -> str:
        """Upload ``data`` to ``path`` and return the path.

        Raises
        ------
        PublishError
            If the store rejects the write.
        """
        try:
            self._store.put_object(path, data, EPUB_CONTENT_TYPE)
        except Exception as exc:
            raise PublishError(f"error uploading EPUB: {exc}") from exc
        logger.info("Uploaded EPUB to %s (%d bytes)", path, len(data))
        return path
