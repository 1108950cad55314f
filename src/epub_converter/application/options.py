"""Typed option objects shared across generation use-cases."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from epub_converter.application.ports import LawDataSource


@dataclass(frozen=True)
class TransformOptions:
    """Transformer configuration.

    ``revision_id`` and ``source`` are set together when the requested
    identifier names a specific revision, so the transformer can resolve
    revision metadata from the same law source.
    """

    revision_id: str | None = None
    source: LawDataSource | None = None

    @property
    def has_revision(self) -> bool:
        return self.revision_id is not None and self.source is not None
