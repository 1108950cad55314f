"""Shared pytest configuration, marker assignment and port fakes."""

from __future__ import annotations

import base64
from collections.abc import Callable
from pathlib import Path

import pytest

from epub_converter.application.options import TransformOptions
from epub_converter.schemas import LawDataResponse, LawRevision


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Attach suite markers based on test file path."""
    del config
    for item in items:
        path = Path(str(item.fspath))
        parts = set(path.parts)
        if "integration_tests" in parts:
            item.add_marker(pytest.mark.integration)
        elif "unit_tests" in parts:
            item.add_marker(pytest.mark.unit)


def encode_law_xml(xml: str | bytes) -> str:
    """Encode XML the way the law API returns ``law_full_text``."""
    raw = xml.encode("utf-8") if isinstance(xml, str) else xml
    return base64.b64encode(raw).decode("ascii")


class InMemoryObjectStore:
    """Object store fake that records every operation in order."""

    def __init__(self) -> None:
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.events: list[tuple[str, str]] = []
        self.failures: dict[tuple[str, str], Exception] = {}

    def fail(self, operation: str, suffix: str, exc: Exception) -> None:
        """Make ``operation`` raise ``exc`` for keys ending with ``suffix``."""
        self.failures[(operation, suffix)] = exc

    def _maybe_fail(self, operation: str, key: str) -> None:
        for (failing_op, suffix), exc in self.failures.items():
            if failing_op == operation and key.endswith(suffix):
                raise exc

    def put_object(self, key: str, body: bytes, content_type: str) -> None:
        self._maybe_fail("put", key)
        self.events.append(("put", key))
        self.objects[key] = (body, content_type)

    def delete_object(self, key: str) -> None:
        self._maybe_fail("delete", key)
        self.events.append(("delete", key))
        self.objects.pop(key, None)


class FakeLawSource:
    """Law source fake serving canned responses."""

    def __init__(self) -> None:
        self.responses: dict[str, LawDataResponse] = {}
        self.revisions: dict[str, list[LawRevision]] = {}
        self.error: Exception | None = None
        self.calls: list[str] = []
        self.on_fetch: Callable[[str], None] | None = None

    def add_law(self, document_id: str, xml: str | bytes) -> None:
        self.responses[document_id] = LawDataResponse(
            law_full_text=encode_law_xml(xml)
        )

    def get_law_data(self, law_id_or_num_or_revision_id: str) -> LawDataResponse:
        self.calls.append(law_id_or_num_or_revision_id)
        if self.on_fetch is not None:
            self.on_fetch(law_id_or_num_or_revision_id)
        if self.error is not None:
            raise self.error
        return self.responses[law_id_or_num_or_revision_id]

    def get_law_revisions(self, law_id_or_num: str) -> list[LawRevision]:
        return self.revisions.get(law_id_or_num, [])


class FakeTransformer:
    """Transformer fake producing deterministic bytes from its input."""

    def __init__(self) -> None:
        self.calls: list[tuple[bytes, TransformOptions]] = []
        self.error: Exception | None = None

    def transform(self, content: bytes, options: TransformOptions) -> bytes:
        self.calls.append((content, options))
        if self.error is not None:
            raise self.error
        return b"EPUB:" + content


@pytest.fixture
def store() -> InMemoryObjectStore:
    """Empty in-memory object store."""
    return InMemoryObjectStore()


@pytest.fixture
def source() -> FakeLawSource:
    """Law source without canned laws."""
    return FakeLawSource()


@pytest.fixture
def transformer() -> FakeTransformer:
    """Deterministic transformer."""
    return FakeTransformer()
