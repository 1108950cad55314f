"""Application use-cases orchestrating EPUB generation."""

from __future__ import annotations

import logging

from epub_converter.application.extract import extract_xml_content
from epub_converter.application.options import TransformOptions
from epub_converter.application.ports import EpubTransformer, LawDataSource, ObjectStore
from epub_converter.application.publisher import ArtifactPublisher
from epub_converter.application.results import ConversionResult
from epub_converter.application.status import (
    ArtifactPaths,
    Clock,
    StatusRecorder,
    log_status_update,
)
from epub_converter.errors import (
    EpubConverterError,
    ExtractionError,
    FetchError,
    GenerationError,
    TransformError,
)

logger = logging.getLogger(__name__)

REVISION_ID_SEPARATOR = "_"
REVISION_ID_COMPONENTS = 3


def is_revision_id(document_id: str) -> bool:
    """Return whether ``document_id`` names a specific law revision.

    Revision IDs have exactly three ``_``-separated components, e.g.
    ``129AC0000000089_20240401_505AC0000000048``.
    """
    return len(document_id.split(REVISION_ID_SEPARATOR)) == REVISION_ID_COMPONENTS


def build_transform_options(
    document_id: str, source: LawDataSource
) -> TransformOptions:
    """Attach revision context only for revision identifiers."""
    if is_revision_id(document_id):
        return TransformOptions(revision_id=document_id, source=source)
    return TransformOptions()


def build_epub(
    document_id: str,
    *,
    source: LawDataSource,
    transformer: EpubTransformer,
) -> bytes:
    """Fetch, extract and transform one law into EPUB bytes.

    Raises
    ------
    FetchError
        If the law source call fails.
    ExtractionError
        If the response carries no usable XML.
    TransformError
        If the transformer fails.
    """
    logger.info("Fetching law data for ID: %s", document_id)
    try:
        law_data = source.get_law_data(document_id)
    except Exception as exc:
        raise FetchError(f"error fetching law data: {exc}") from exc

    try:
        xml_content = extract_xml_content(law_data, document_id)
    except ExtractionError as exc:
        raise type(exc)(f"error extracting XML content: {exc}") from exc

    options = build_transform_options(document_id, source)
    try:
        epub_bytes = transformer.transform(xml_content, options)
    except Exception as exc:
        raise TransformError(f"error creating EPUB: {exc}") from exc

    logger.info(
        "Successfully converted law ID %s to EPUB (%d bytes)",
        document_id,
        len(epub_bytes),
    )
    return epub_bytes


def generate_epub(
    document_id: str,
    version: str,
    *,
    source: LawDataSource,
    transformer: EpubTransformer,
    store: ObjectStore,
    clock: Clock | None = None,
) -> ConversionResult:
    """Use-case: generate an EPUB for ``document_id`` and publish it.

    The status record at ``{version}/{document_id}.status`` is set to
    PROCESSING first, overwritten with FAILED on any terminal error and
    deleted after a successful publish. Status writes never change the
    outcome of the run.

    Parameters
    ----------
    document_id : str
        Law ID, law number or revision ID.
    version : str
        Storage prefix for the status record and artifact.
    source : LawDataSource
        Remote law source.
    transformer : EpubTransformer
        XML-to-EPUB transformer.
    store : ObjectStore
        Object store for status records and artifacts.
    clock : Callable[[], datetime] | None, default=None
        Timestamp source for status records.

    Returns
    -------
    ConversionResult
        Published artifact location and bytes.

    Raises
    ------
    GenerationError
        On any fetch, extraction, transform or publish failure.
    """
    paths = ArtifactPaths.for_document(version, document_id)
    recorder = StatusRecorder(store, clock=clock)
    publisher = ArtifactPublisher(store)

    log_status_update(recorder.mark_processing(paths.status))

    try:
        epub_bytes = build_epub(document_id, source=source, transformer=transformer)
        publisher.publish(paths.epub, epub_bytes)
    except GenerationError as exc:
        _record_failure(recorder, paths.status, document_id, exc)
        raise
    except Exception as exc:
        error = GenerationError(str(exc) or type(exc).__name__)
        _record_failure(recorder, paths.status, document_id, error)
        raise error from exc

    cleared = recorder.clear(paths.status)
    log_status_update(cleared)

    logger.info("Successfully generated EPUB for %s", document_id)
    return ConversionResult(
        document_id=document_id,
        version=version,
        epub_path=paths.epub,
        epub_bytes=epub_bytes,
        status_cleared=cleared.ok,
    )


def _record_failure(
    recorder: StatusRecorder,
    status_path: str,
    document_id: str,
    exc: EpubConverterError,
) -> None:
    logger.error("Failed to generate EPUB for %s: %s", document_id, exc)
    log_status_update(recorder.mark_failed(status_path, str(exc) or type(exc).__name__))
