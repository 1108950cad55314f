"""Environment-driven settings and logging setup."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from epub_converter.schemas import DEFAULT_VERSION

DEFAULT_BUCKET_NAME = "epub-storage"
DEFAULT_API_BASE_URL = "https://laws.e-gov.go.jp/api/2"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class ServiceSettings:
    """Runtime settings shared by the HTTP and CLI entry points.

    Parameters
    ----------
    bucket_name : str
        Object-store bucket holding status records and EPUB artifacts.
    default_version : str
        Version prefix used when a request does not carry one.
    api_base_url : str
        Base URL of the e-Gov law API v2.
    s3_endpoint_url : str | None
        Endpoint override for S3-compatible stores.
    region_name : str | None
        Object-store region.
    log_level : str
        Root logging level name.
    """

    bucket_name: str = DEFAULT_BUCKET_NAME
    default_version: str = DEFAULT_VERSION
    api_base_url: str = DEFAULT_API_BASE_URL
    s3_endpoint_url: str | None = None
    region_name: str | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ServiceSettings:
        """Build settings from environment variables, blank values ignored."""
        env = os.environ if environ is None else environ

        def _get(name: str) -> str | None:
            value = env.get(name, "").strip()
            return value or None

        return cls(
            bucket_name=_get("EPUB_BUCKET_NAME") or DEFAULT_BUCKET_NAME,
            default_version=_get("EPUB_DEFAULT_VERSION") or DEFAULT_VERSION,
            api_base_url=(_get("JPLAW_API_BASE_URL") or DEFAULT_API_BASE_URL).rstrip("/"),
            s3_endpoint_url=_get("EPUB_S3_ENDPOINT_URL"),
            region_name=_get("AWS_REGION"),
            log_level=(_get("EPUB_LOG_LEVEL") or "INFO").upper(),
        )


def configure_logging(level: str | int = logging.INFO) -> None:
    """Configure root logging once for an entry point."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
