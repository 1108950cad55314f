"""Exception hierarchy for EPUB generation."""

from __future__ import annotations


class EpubConverterError(Exception):
    """Base error for the package.

    Attributes
    ----------
    exit_code : int
        Process exit code used by the CLI when the error reaches it.
    """

    exit_code: int = 1


class BadRequestError(EpubConverterError):
    """Inbound payload could not be decoded or validated."""


class DependencyError(EpubConverterError):
    """An optional third-party library is not installed."""


class GenerationError(EpubConverterError):
    """Terminal failure of a generation run."""


class FetchError(GenerationError):
    """Remote law source was unreachable or rejected the identifier."""


class ExtractionError(GenerationError):
    """Law data response did not carry usable XML content."""


class ContentMissingError(ExtractionError):
    """Response carries no full-text field."""


class FormatMismatchError(ExtractionError):
    """Full-text field is not an encoded string."""


class DecodeError(ExtractionError):
    """Full-text field is not valid base64."""


class TransformError(GenerationError):
    """EPUB transformer rejected the content."""


class PublishError(GenerationError):
    """EPUB artifact could not be written to the object store."""


class StatusWriteError(EpubConverterError):
    """Status record could not be written."""


class StatusDeleteError(EpubConverterError):
    """Status record could not be deleted."""
