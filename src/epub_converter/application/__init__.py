"""Application-layer use-cases, ports and result objects."""

from __future__ import annotations

from epub_converter.application.extract import extract_xml_content
from epub_converter.application.options import TransformOptions
from epub_converter.application.ports import EpubTransformer, LawDataSource, ObjectStore
from epub_converter.application.results import ConversionResult, StatusUpdate
from epub_converter.application.status import ArtifactPaths, StatusRecorder
from epub_converter.application.use_cases import (
    build_epub,
    generate_epub,
    is_revision_id,
)

__all__ = [
    "ArtifactPaths",
    "ConversionResult",
    "EpubTransformer",
    "LawDataSource",
    "ObjectStore",
    "StatusRecorder",
    "StatusUpdate",
    "TransformOptions",
    "build_epub",
    "extract_xml_content",
    "generate_epub",
    "is_revision_id",
]
