"""Shared type aliases and content types."""

from __future__ import annotations

from typing import Literal

type StatusValue = Literal["PROCESSING", "FAILED"]
type StatusAction = Literal["write", "delete"]

EPUB_CONTENT_TYPE = "application/epub+zip"
JSON_CONTENT_TYPE = "application/json"
