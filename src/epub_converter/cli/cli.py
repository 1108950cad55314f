#!/usr/bin/env python3
"""
epub_converter.cli.cli

Typer-based CLI that generates a law EPUB and publishes it to object storage.

It runs the same pipeline as the HTTP server: the status record is written to
``{version}/{id}.status`` while the run is in flight and the EPUB lands at
``{version}/{id}.epub``.

Examples
--------
Generate the current text of a law:

    epub-converter generate 129AC0000000089

Generate a specific revision into another bucket with debug logging:

    epub-converter generate 129AC0000000089_20240401_505AC0000000048 \\
        --version v2.0.0 --bucket my-epubs --verbose
"""

from __future__ import annotations

import logging
import sys
import traceback

import typer

from epub_converter.config import ServiceSettings, configure_logging
from epub_converter.errors import EpubConverterError

app = typer.Typer(
    name="epub-converter",
    help="Generate EPUB files for Japanese laws from the e-Gov law API.",
    no_args_is_help=True,
)

DOCTOR_MODULES = (
    "httpx",
    "pydantic",
    "boto3",
    "lxml",
    "ebooklib",
    "fastapi",
    "uvicorn",
    "typer",
)


def _print_generation_error(exc: Exception, debug: bool) -> int:
    """Print a user-friendly generation error.

    Parameters
    ----------
    exc : Exception
        Exception raised during generation.
    debug : bool
        Whether to include traceback details.

    Returns
    -------
    int
        Process exit code.
    """
    typer.secho(f"✗ {type(exc).__name__}: {exc}", fg=typer.colors.RED, err=True)
    if debug:
        typer.echo("\nTraceback:", err=True)
        typer.echo(
            "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
            err=True,
        )
    code = getattr(exc, "exit_code", None)
    if isinstance(code, int) and code > 0:
        return code
    return 1


# -----------------------------
# Global options
# -----------------------------
@app.callback()
def _main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Show full tracebacks on error."),
) -> None:
    """Initialize shared CLI state."""
    ctx.obj = {"debug": debug}


# -----------------------------
# Commands
# -----------------------------
@app.command("generate")
def generate_cmd(
    ctx: typer.Context,
    revision_id: str = typer.Argument(
        ...,
        help="Law ID, law number or revision ID (LAWID_DATE_AMENDLAWID).",
    ),
    version: str | None = typer.Option(
        None,
        "--version",
        help="Storage version prefix. Defaults to EPUB_DEFAULT_VERSION or v1.0.0.",
    ),
    bucket: str | None = typer.Option(
        None,
        "--bucket",
        "-b",
        help="Bucket override. Defaults to EPUB_BUCKET_NAME or epub-storage.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Generate the EPUB for a law and publish it.

    Parameters
    ----------
    ctx : typer.Context
        Typer context containing global options.
    revision_id : str
        Identifier passed to the law API.
    version : str | None
        Storage version prefix.
    bucket : str | None
        Bucket override.
    verbose : bool
        Whether to log at DEBUG level.
    """
    debug: bool = bool(ctx.obj.get("debug", False))
    settings = ServiceSettings.from_env()
    configure_logging(logging.DEBUG if verbose else settings.log_level)

    try:
        from epub_converter.converter.core import ConversionRequest, run_generation

        request = ConversionRequest(
            document_id=revision_id.strip(),
            version=(version or settings.default_version).strip(),
            bucket_name=bucket,
        )
        result = run_generation(request, settings)
        target = bucket or settings.bucket_name
        typer.secho(
            f"✓ Saved: s3://{target}/{result.epub_path} ({result.size_bytes} bytes)",
            fg=typer.colors.GREEN,
        )
    except EpubConverterError as exc:
        raise typer.Exit(code=_print_generation_error(exc, debug))
    except Exception as exc:
        # Unexpected crash: still show a clean message; debug prints traceback.
        raise typer.Exit(code=_print_generation_error(exc, debug))


@app.command("doctor")
def doctor_cmd() -> None:
    """Print installed dependency versions and effective settings."""
    import importlib.metadata as metadata

    typer.echo(f"Python: {sys.version.split()[0]}")
    for module in DOCTOR_MODULES:
        try:
            version = metadata.version(module)
            typer.echo(f"{module}: {version}")
        except metadata.PackageNotFoundError:
            typer.echo(f"{module}: <not installed>")

    settings = ServiceSettings.from_env()
    typer.echo(f"bucket: {settings.bucket_name}")
    typer.echo(f"default version: {settings.default_version}")
    typer.echo(f"law API: {settings.api_base_url}")


if __name__ == "__main__":
    app()
