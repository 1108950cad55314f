"""HTTP server for EPUB generation requests."""

from __future__ import annotations

import argparse
import logging
import os

import uvicorn
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ConfigDict, ValidationError

from epub_converter import __version__
from epub_converter.config import ServiceSettings, configure_logging
from epub_converter.converter.core import ConversionRequest, run_generation
from epub_converter.errors import BadRequestError, GenerationError, PublishError
from epub_converter.schemas import GenerateEpubRequest, GenerateEpubResponse

logger = logging.getLogger(__name__)

INVALID_REQUEST_DETAIL = "Invalid request"
GENERATE_FAILED_DETAIL = "Failed to generate EPUB"
SAVE_FAILED_DETAIL = "Failed to save EPUB"


class HealthResponse(BaseModel):
    """Health response payload."""

    model_config = ConfigDict(extra="forbid")

    status: str


class ReadyResponse(BaseModel):
    """Readiness response payload."""

    model_config = ConfigDict(extra="forbid")

    status: str


def parse_generate_request(
    raw_body: bytes, default_version: str
) -> GenerateEpubRequest:
    """Decode and validate a JSON request body.

    Raises
    ------
    BadRequestError
        If the body is not JSON or does not match the request schema.
    """
    try:
        payload = GenerateEpubRequest.model_validate_json(raw_body or b"null")
    except ValidationError as exc:
        raise BadRequestError(f"invalid request body: {exc}") from exc
    if payload.version is None:
        payload = payload.model_copy(update={"version": default_version})
    return payload


def create_app(settings: ServiceSettings | None = None) -> FastAPI:
    """Create EPUB generation HTTP application."""
    app_settings = settings or ServiceSettings.from_env()
    app = FastAPI(
        title="Law EPUB Generator",
        version=__version__,
        description=(
            "Generate EPUB files for Japanese laws and publish them to object "
            "storage with pollable status records."
        ),
    )

    @app.get("/healthz", response_model=HealthResponse)
    async def healthz() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/readyz", response_model=ReadyResponse)
    async def readyz() -> ReadyResponse:
        return ReadyResponse(status="ready")

    @app.post("/", response_model=GenerateEpubResponse, include_in_schema=False)
    @app.post("/v1/epub/generate", response_model=GenerateEpubResponse)
    async def generate(request: Request) -> GenerateEpubResponse:
        """Generate and publish the EPUB for one law identifier."""
        try:
            body = parse_generate_request(
                await request.body(), app_settings.default_version
            )
        except BadRequestError as exc:
            logger.warning("Failed to decode request: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=INVALID_REQUEST_DETAIL,
            ) from exc

        conversion = ConversionRequest(
            document_id=body.id,
            version=body.version or app_settings.default_version,
        )
        try:
            await run_in_threadpool(run_generation, conversion, app_settings)
        except PublishError as exc:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=SAVE_FAILED_DETAIL,
            ) from exc
        except GenerationError as exc:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=GENERATE_FAILED_DETAIL,
            ) from exc
        except Exception as exc:
            logger.exception("unexpected error during EPUB generation")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=GENERATE_FAILED_DETAIL,
            ) from exc

        return GenerateEpubResponse(id=body.id)

    return app


app = create_app()


def main() -> None:
    """Run EPUB generation HTTP entrypoint."""
    settings = ServiceSettings.from_env()
    configure_logging(settings.log_level)
    parser = argparse.ArgumentParser(description="Law EPUB generation HTTP server.")
    parser.add_argument(
        "--host",
        default=os.getenv("EPUB_HTTP_HOST", "0.0.0.0"),
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("EPUB_HTTP_PORT", "8080")),
    )
    args = parser.parse_args()
    uvicorn.run(
        "epub_converter.converter.http_server:app",
        host=args.host,
        port=args.port,
        reload=False,
    )


if __name__ == "__main__":
    main()
