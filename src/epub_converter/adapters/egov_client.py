"""e-Gov law API v2 client implementing the law source port."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from epub_converter.config import DEFAULT_API_BASE_URL
from epub_converter.errors import FetchError
from epub_converter.schemas import LawDataResponse, LawRevision, LawRevisionsResponse

logger = logging.getLogger(__name__)

LAW_FULL_TEXT_FORMAT_XML = "xml"


class EgovLawApiClient:
    """Fetch law data from ``laws.e-gov.go.jp``.

    A fresh ``httpx.Client`` is opened and closed for every call. Timeouts are
    httpx defaults unless ``timeout`` is given.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        *,
        timeout: httpx.Timeout | float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def get_law_data(self, law_id_or_num_or_revision_id: str) -> LawDataResponse:
        """Fetch a law with its full text as base64-encoded XML."""
        payload = self._get_json(
            f"/law_data/{law_id_or_num_or_revision_id}",
            params={"law_full_text_format": LAW_FULL_TEXT_FORMAT_XML},
        )
        try:
            return LawDataResponse.model_validate(payload)
        except ValidationError as exc:
            raise FetchError(f"unexpected law_data response: {exc}") from exc

    def get_law_revisions(self, law_id_or_num: str) -> list[LawRevision]:
        """List revisions known for a law ID or law number."""
        payload = self._get_json(f"/law_revisions/{law_id_or_num}")
        try:
            return LawRevisionsResponse.model_validate(payload).revisions
        except ValidationError as exc:
            raise FetchError(f"unexpected law_revisions response: {exc}") from exc

    def _client(self) -> httpx.Client:
        kwargs: dict[str, Any] = {"base_url": self.base_url}
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return httpx.Client(**kwargs)

    def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        logger.debug("GET %s%s", self.base_url, path)
        try:
            with self._client() as client:
                response = client.get(path, params=params)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                f"law API returned {exc.response.status_code} for {path}"
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"law API request failed for {path}: {exc}") from exc
        except ValueError as exc:
            raise FetchError(f"law API returned invalid JSON for {path}") from exc
