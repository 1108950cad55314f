"""Unit tests for the EPUB generation HTTP transport."""

from __future__ import annotations

import argparse
import os
import types
from typing import TYPE_CHECKING, Protocol, cast

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from epub_converter.application.results import ConversionResult
from epub_converter.config import ServiceSettings
from epub_converter.converter.core import ConversionRequest
from epub_converter.errors import (
    BadRequestError,
    FetchError,
    PublishError,
    TransformError,
)

if TYPE_CHECKING:
    from fastapi.testclient import TestClient

pytest.importorskip("fastapi")
pytest.importorskip("httpx")

import epub_converter.converter.http_server as module  # noqa: E402

LAW_ID = "129AC0000000089"
_HYPOTHESIS_MAX_EXAMPLES = int(os.getenv("HYPOTHESIS_MAX_EXAMPLES", "30"))


class _UvicornLike(Protocol):
    def run(self, app_ref: str, *, host: str, port: int, reload: bool) -> None: ...


def _client(app_settings: ServiceSettings | None = None) -> TestClient:
    from fastapi.testclient import TestClient

    return TestClient(module.create_app(app_settings or ServiceSettings()))


def _fake_generation(
    monkeypatch: pytest.MonkeyPatch,
    error: Exception | None = None,
) -> list[ConversionRequest]:
    calls: list[ConversionRequest] = []

    def fake_run_generation(
        request: ConversionRequest, app_settings: ServiceSettings | None = None
    ) -> ConversionResult:
        calls.append(request)
        if error is not None:
            raise error
        return ConversionResult(
            document_id=request.document_id,
            version=request.version,
            epub_path=f"{request.version}/{request.document_id}.epub",
            epub_bytes=b"epub",
        )

    monkeypatch.setattr(module, "run_generation", fake_run_generation)
    return calls


def test_generate_returns_success_payload(monkeypatch: pytest.MonkeyPatch) -> None:
    """Acknowledge a finished run with the requested identifier."""
    calls = _fake_generation(monkeypatch)
    response = _client().post(
        "/v1/epub/generate", json={"id": LAW_ID, "version": "v2.0.0"}
    )

    assert response.status_code == 200
    assert response.json() == {"status": "success", "id": LAW_ID}
    assert calls == [ConversionRequest(document_id=LAW_ID, version="v2.0.0")]


def test_root_path_accepts_generation_requests(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Serve the same handler on the root path."""
    calls = _fake_generation(monkeypatch)
    response = _client().post("/", json={"id": LAW_ID})

    assert response.status_code == 200
    assert response.json() == {"status": "success", "id": LAW_ID}
    assert len(calls) == 1


def test_generate_defaults_version_from_settings(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Use the configured default version when the body has none."""
    calls = _fake_generation(monkeypatch)
    client = _client(ServiceSettings(default_version="v9.9.9"))
    response = client.post("/v1/epub/generate", json={"id": LAW_ID})

    assert response.status_code == 200
    assert calls[0].version == "v9.9.9"


@pytest.mark.parametrize("version", [None, "", "   "])
def test_generate_defaults_null_or_blank_version(
    monkeypatch: pytest.MonkeyPatch, version: str | None
) -> None:
    """Treat a null or blank version like an absent one."""
    calls = _fake_generation(monkeypatch)
    client = _client(ServiceSettings(default_version="v9.9.9"))
    response = client.post(
        "/v1/epub/generate", json={"id": LAW_ID, "version": version}
    )

    assert response.status_code == 200
    assert response.json() == {"status": "success", "id": LAW_ID}
    assert calls == [ConversionRequest(document_id=LAW_ID, version="v9.9.9")]


def test_parse_generate_request_fills_null_version() -> None:
    """Fill the default version when the body carries null."""
    payload = module.parse_generate_request(
        b'{"id": "129AC0000000089", "version": null}', "v1.0.0"
    )
    assert payload.version == "v1.0.0"


def test_generate_rejects_non_string_version(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep rejecting versions of the wrong type."""
    calls = _fake_generation(monkeypatch)
    response = _client().post("/v1/epub/generate", json={"id": LAW_ID, "version": 3})

    assert response.status_code == 400
    assert calls == []


def test_generate_ignores_unknown_fields(monkeypatch: pytest.MonkeyPatch) -> None:
    """Accept bodies carrying extra keys."""
    calls = _fake_generation(monkeypatch)
    response = _client().post(
        "/v1/epub/generate", json={"id": LAW_ID, "format": "epub3"}
    )

    assert response.status_code == 200
    assert calls[0].document_id == LAW_ID


@pytest.mark.parametrize(
    "body",
    [
        b"not json",
        b"",
        b"[]",
        b"{}",
        b'{"id": ""}',
        b'{"id": "   "}',
        b'{"id": 42}',
    ],
)
def test_generate_rejects_invalid_bodies(
    monkeypatch: pytest.MonkeyPatch, body: bytes
) -> None:
    """Answer 400 without touching the pipeline."""
    calls = _fake_generation(monkeypatch)
    response = _client().post(
        "/v1/epub/generate",
        content=body,
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"detail": "Invalid request"}
    assert calls == []


_NON_OBJECT_TEXT = st.text(
    alphabet=st.characters(exclude_categories=("Cs",), exclude_characters="{"),
    max_size=64,
)


@settings(
    max_examples=_HYPOTHESIS_MAX_EXAMPLES,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)
@given(body=_NON_OBJECT_TEXT)
def test_generate_rejects_non_object_bodies_property(
    monkeypatch: pytest.MonkeyPatch, body: str
) -> None:
    """Property check: bodies that are not JSON objects never reach the pipeline."""
    calls = _fake_generation(monkeypatch)
    response = _client().post(
        "/v1/epub/generate",
        content=body.encode("utf-8"),
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 400
    assert calls == []


@pytest.mark.parametrize(
    ("error", "detail"),
    [
        (FetchError("error fetching law data: boom"), "Failed to generate EPUB"),
        (TransformError("error creating EPUB: boom"), "Failed to generate EPUB"),
        (PublishError("error uploading EPUB: boom"), "Failed to save EPUB"),
        (RuntimeError("boom"), "Failed to generate EPUB"),
    ],
)
def test_generate_maps_failures_to_500(
    monkeypatch: pytest.MonkeyPatch, error: Exception, detail: str
) -> None:
    """Map pipeline failures to a generic 500 detail."""
    _fake_generation(monkeypatch, error=error)
    response = _client().post("/v1/epub/generate", json={"id": LAW_ID})

    assert response.status_code == 500
    assert response.json() == {"detail": detail}
    assert "boom" not in response.text


def test_parse_generate_request_keeps_explicit_version() -> None:
    """Keep a version the caller sent."""
    payload = module.parse_generate_request(
        b'{"id": " 129AC0000000089 ", "version": "v3.0.0"}', "v1.0.0"
    )
    assert payload.id == LAW_ID
    assert payload.version == "v3.0.0"


def test_parse_generate_request_raises_bad_request() -> None:
    """Wrap validation failures in the bad-request error."""
    with pytest.raises(BadRequestError, match="invalid request body"):
        module.parse_generate_request(b"{", "v1.0.0")


def test_health_and_ready_endpoints() -> None:
    """Expose health and readiness probes."""
    client = _client()
    health = client.get("/healthz")
    ready = client.get("/readyz")

    assert health.status_code == 200
    assert health.json() == {"status": "ok"}
    assert ready.status_code == 200
    assert ready.json() == {"status": "ready"}


def test_main_runs_uvicorn(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Parse CLI args and pass them to uvicorn."""
    calls: dict[str, str | int | bool] = {}

    monkeypatch.setattr(
        argparse.ArgumentParser,
        "parse_args",  # noqa: ARG005
        lambda self: argparse.Namespace(host="127.0.0.1", port=9999),
    )

    def fake_run(app_ref: str, *, host: str, port: int, reload: bool) -> None:
        calls["app_ref"] = app_ref
        calls["host"] = host
        calls["port"] = port
        calls["reload"] = reload

    monkeypatch.setattr(
        module,
        "uvicorn",
        cast(_UvicornLike, types.SimpleNamespace(run=fake_run)),
    )
    module.main()
    assert calls == {
        "app_ref": "epub_converter.converter.http_server:app",
        "host": "127.0.0.1",
        "port": 9999,
        "reload": False,
    }
