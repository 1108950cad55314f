"""S3-compatible object store implementing the storage port."""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import closing
from typing import Any

import boto3

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], Any]


class S3ObjectStore:
    """Store objects in one bucket of an S3-compatible service.

    A client is created for every operation and closed when it returns,
    including on error.

    Parameters
    ----------
    bucket_name : str
        Target bucket.
    endpoint_url : str | None, default=None
        Endpoint override (MinIO, GCS interoperability, LocalStack).
    region_name : str | None, default=None
        Region passed to boto3.
    client_factory : Callable[[], Any] | None, default=None
        Factory returning a boto3 S3 client; defaults to ``boto3.client``.
    """

    def __init__(
        self,
        bucket_name: str,
        *,
        endpoint_url: str | None = None,
        region_name: str | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self.bucket_name = bucket_name
        self.endpoint_url = endpoint_url
        self.region_name = region_name
        self._client_factory = client_factory or self._default_client

    def _default_client(self) -> Any:
        return boto3.client(
            "s3",
            endpoint_url=self.endpoint_url,
            region_name=self.region_name,
        )

    def put_object(self, key: str, body: bytes, content_type: str) -> None:
        """Create or overwrite ``key`` with ``body``."""
        with closing(self._client_factory()) as client:
            client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=body,
                ContentType=content_type,
            )
        logger.debug("Put s3://%s/%s (%s)", self.bucket_name, key, content_type)

    def delete_object(self, key: str) -> None:
        """Delete ``key``; deleting a missing key is not an error."""
        with closing(self._client_factory()) as client:
            client.delete_object(Bucket=self.bucket_name, Key=key)
        logger.debug("Deleted s3://%s/%s", self.bucket_name, key)

    def url_for(self, key: str) -> str:
        """Return the ``s3://`` URL of ``key``."""
        return f"s3://{self.bucket_name}/{key}"
