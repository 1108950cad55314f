"""Generate EPUB files for Japanese laws with pollable status records."""

from __future__ import annotations

from epub_converter.errors import (
    EpubConverterError,
    GenerationError,
)

__version__ = "0.1.0"

__all__ = [
    "EpubConverterError",
    "GenerationError",
    "__version__",
]
