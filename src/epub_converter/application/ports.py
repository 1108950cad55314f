"""Application ports for the law source, EPUB transformer and object store."""

from __future__ import annotations

from typing import Protocol

from epub_converter.application.options import TransformOptions
from epub_converter.schemas import LawDataResponse, LawRevision


class LawDataSource(Protocol):
    """Fetch law documents from a remote law database."""

    def get_law_data(self, law_id_or_num_or_revision_id: str) -> LawDataResponse:
        """Fetch a law with its full text encoded as XML."""

    def get_law_revisions(self, law_id_or_num: str) -> list[LawRevision]:
        """List known revisions of a law."""


class EpubTransformer(Protocol):
    """Package law XML into an EPUB container."""

    def transform(self, content: bytes, options: TransformOptions) -> bytes:
        """Return EPUB bytes for the given law XML."""


class ObjectStore(Protocol):
    """Durable key/value blob storage bound to a single bucket."""

    def put_object(self, key: str, body: bytes, content_type: str) -> None:
        """Create or overwrite an object."""

    def delete_object(self, key: str) -> None:
        """Delete an object."""
