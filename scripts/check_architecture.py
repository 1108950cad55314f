#!/usr/bin/env python3
"""Architecture boundary checks."""

from __future__ import annotations

from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
PACKAGE = ROOT / "src/epub_converter"

ADAPTER_LIBRARIES = [
    "import httpx",
    "from httpx",
    "import boto3",
    "from boto3",
    "import lxml",
    "from lxml",
    "import ebooklib",
    "from ebooklib",
]
TRANSPORT_LIBRARIES = [
    "import typer",
    "from typer",
    "import fastapi",
    "from fastapi",
    "import uvicorn",
]


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _assert_no_imports(path: Path, banned: list[str]) -> None:
    text = _read(path)
    for token in banned:
        if token in text:
            raise SystemExit(f"Architecture violation in {path}: found '{token}'")


def main() -> None:
    """Run repository architecture boundary checks."""
    _assert_no_imports(PACKAGE / "cli/cli.py", ADAPTER_LIBRARIES)

    for path in (PACKAGE / "application").glob("*.py"):
        _assert_no_imports(path, ADAPTER_LIBRARIES + TRANSPORT_LIBRARIES)

    for path in (PACKAGE / "adapters").glob("*.py"):
        _assert_no_imports(path, TRANSPORT_LIBRARIES)

    print("Architecture checks passed.")


if __name__ == "__main__":
    main()
