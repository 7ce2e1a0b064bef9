from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .cache import Cache
from .config import DEFAULT_PROVIDER
from .enrichment import CACHE_PREFIX
from .errors import ServiceInitError
from .location import StaticLocation, exif_location
from .preferences import FixedRadius, Preferences
from .service import build_pipeline
from .types import Coordinates, RecognitionResult

app = typer.Typer(add_completion=False, help="Recognise landmarks from photos using GPS and image embeddings")
console = Console()
err_console = Console(stderr=True)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _print_human(result: RecognitionResult) -> None:
    title = result.landmark_name if result.success else result.outcome.value.replace("_", " ").title()
    table = Table(title=title)
    table.add_column("Confidence")
    table.add_column("Visual")
    table.add_column("GPS")
    table.add_column("Bonus")
    table.add_row(
        f"{result.confidence:.2f}",
        f"{result.visual_score:.2f}",
        f"{result.gps_score:.2f}",
        "yes" if result.bonus_applied else "no",
    )
    console.print(table)
    if result.success:
        console.print(f"[bold]Landmark #{result.landmark_id}[/bold]")
        console.print(result.description)
    else:
        console.print(f"[yellow]{result.message}[/yellow]")


@app.command()
def recognize(
    image: Path = typer.Argument(..., exists=True, readable=True, help="Path to photo"),
    landmarks: Path = typer.Option(..., exists=True, readable=True, help="Landmark CSV"),
    prototypes: Path = typer.Option(..., exists=True, readable=True, help="Prototype embeddings JSON"),
    model: Path = typer.Option(..., exists=True, readable=True, help="TorchScript embedding model"),
    lat: Optional[float] = typer.Option(None, min=-90, max=90, help="Current latitude (default: photo EXIF)"),
    lon: Optional[float] = typer.Option(None, min=-180, max=180, help="Current longitude (default: photo EXIF)"),
    radius: Optional[float] = typer.Option(None, min=0.1, help="Search radius in km for this run (default: stored setting)"),
    provider: str = typer.Option(DEFAULT_PROVIDER, help="Text backend: gemini, openai or none"),
    json_out: Optional[Path] = typer.Option(None, help="Write full JSON to this file"),
    json_only: bool = typer.Option(False, help="Print only JSON to stdout"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Recognise the landmark in IMAGE."""
    load_dotenv()  # allow .env
    _setup_logging(verbose)

    if lat is not None and lon is not None:
        position: Optional[Coordinates] = Coordinates(latitude=lat, longitude=lon)
    else:
        position = exif_location(image)
        if position is None:
            err_console.print("[dim]No location given; using visual recognition only[/dim]")

    try:
        pipeline = build_pipeline(
            landmarks,
            prototypes,
            model,
            location=StaticLocation(position),
            preferences=FixedRadius(radius) if radius is not None else None,
            provider=provider,
        )
    except ServiceInitError as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)

    try:
        result = pipeline.recognize(image)
    finally:
        pipeline.close()

    if json_only or json_out:
        payload = json.loads(result.model_dump_json())
        if json_only:
            print(json.dumps(payload, ensure_ascii=False, indent=2))
        if json_out:
            json_out.write_text(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        _print_human(result)


@app.command()
def radius(
    km: Optional[float] = typer.Argument(None, min=0.1, help="New search radius in km"),
):
    """Show or set the landmark search radius."""
    prefs = Preferences()
    if km is not None:
        prefs.set_radius_km(km)
    console.print(f"Search radius: {prefs.get_radius_km():.1f} km")


@app.command("clear-cache")
def clear_cache():
    """Remove cached landmark descriptions."""
    removed = Cache().clear(CACHE_PREFIX)
    console.print(f"Removed {removed} cached descriptions")


if __name__ == "__main__":
    app()
