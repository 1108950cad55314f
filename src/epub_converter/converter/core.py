"""Shared generation core used by the HTTP and CLI entry points."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from epub_converter.adapters.egov_client import EgovLawApiClient
from epub_converter.adapters.epub_transformer import LawXmlEpubTransformer
from epub_converter.adapters.s3_store import S3ObjectStore
from epub_converter.application.ports import EpubTransformer, LawDataSource, ObjectStore
from epub_converter.application.results import ConversionResult
from epub_converter.application.use_cases import generate_epub
from epub_converter.config import ServiceSettings
from epub_converter.schemas import DEFAULT_VERSION

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionRequest:
    """Normalized generation request.

    Parameters
    ----------
    document_id : str
        Law ID, law number or revision ID.
    version : str, default="v1.0.0"
        Storage prefix for the status record and artifact.
    bucket_name : str | None, default=None
        Bucket override; settings are used when omitted.
    """

    document_id: str
    version: str = DEFAULT_VERSION
    bucket_name: str | None = None

    def __post_init__(self) -> None:
        if not self.document_id.strip():
            raise ValueError("document_id cannot be empty")
        if not self.version.strip():
            raise ValueError("version cannot be empty")


@dataclass(frozen=True)
class Collaborators:
    """Adapters wired into one generation run."""

    source: LawDataSource
    transformer: EpubTransformer
    store: ObjectStore


def build_collaborators(
    settings: ServiceSettings,
    bucket_name: str | None = None,
) -> Collaborators:
    """Create the default adapters from settings."""
    return Collaborators(
        source=EgovLawApiClient(settings.api_base_url),
        transformer=LawXmlEpubTransformer(),
        store=S3ObjectStore(
            bucket_name or settings.bucket_name,
            endpoint_url=settings.s3_endpoint_url,
            region_name=settings.region_name,
        ),
    )


def run_generation(
    request: ConversionRequest,
    settings: ServiceSettings | None = None,
    collaborators: Collaborators | None = None,
) -> ConversionResult:
    """Run one generation with default or injected adapters.

    Raises
    ------
    GenerationError
        If the run fails; the status record holds the cause.
    """
    settings = settings or ServiceSettings.from_env()
    collaborators = collaborators or build_collaborators(settings, request.bucket_name)
    logger.debug(
        "Generating %s/%s into bucket %s",
        request.version,
        request.document_id,
        request.bucket_name or settings.bucket_name,
    )
    return generate_epub(
        request.document_id,
        request.version,
        source=collaborators.source,
        transformer=collaborators.transformer,
        store=collaborators.store,
    )
