"""Command line interface for the Shrine API."""
from __future__ import annotations

import json
import logging
from typing import Optional

import typer

from backend.shrine_api.services import ShrineServiceError, build_pipeline, write_snapshot
from backend.shrine_api.settings import ShrineSettings

from .client import ShrineApiError, create_client, get_json


DEFAULT_API_BASE = "http://localhost:3000"

app = typer.Typer(help="Fetch Shrine of Secrets data and query the Shrine API.")


def _api_base_option() -> typer.Option:
    return typer.Option(
        DEFAULT_API_BASE,
        "--api-base",
        help="Base URL for the Shrine API service.",
        show_default=True,
        envvar="SHRINE_API_BASE",
    )


def _echo_json(payload: object) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


@app.command()
def update(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Snapshot file to write. Defaults to the configured snapshot path.",
    ),
    verbose: bool = typer.Option(False, "--verbose/--quiet", help="Log each source attempt."),
) -> None:
    """Fetch the shrine once and save the enriched snapshot as JSON."""

    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING)
    settings = ShrineSettings()
    typer.echo("Fetching Shrine of Secrets...")

    try:
        snapshot = build_pipeline(settings).run()
    except ShrineServiceError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    target = write_snapshot(snapshot, output or settings.snapshot_path)
    typer.echo(f"Saved shrine data to {target}")


@app.command()
def health(api_base: str = _api_base_option()) -> None:
    """Call the /health endpoint and pretty-print the response."""

    try:
        with create_client(api_base) as client:
            payload = get_json(client, "/health")
    except ShrineApiError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    _echo_json(payload)


@app.command()
def shrine(
    images_only: bool = typer.Option(
        False, "--images-only/--full", help="Print only the perk name and image records."
    ),
    api_base: str = _api_base_option(),
) -> None:
    """Call the /shrine endpoint and pretty-print the snapshot."""

    try:
        with create_client(api_base) as client:
            payload = get_json(client, "/shrine")
    except ShrineApiError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    if images_only:
        _echo_json(payload.get("images", []))
        return
    if payload.get("error"):
        typer.echo(f"Warning: {payload['error']}", err=True)
    _echo_json(payload)
