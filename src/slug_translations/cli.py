"""Command-line interface for managing translated slugs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import SlugConfig, ensure_config
from .errors import SlugError
from .service import SlugService, create_service
from .slugging.models import SluggableRecord

app = typer.Typer(help="Resolve and assign per-locale slugs for translated records.")
console = Console()

LOCALE_OPTION = typer.Option(None, "--locale", "-l", help="Locale of the operation (defaults to configuration)")


def _build_service(ctx: typer.Context) -> tuple[SlugService, Callable[[], None]]:
    options = ctx.obj or {}
    try:
        config: SlugConfig = ensure_config(
            default_locale=options.get("default_locale"),
            backend=options.get("backend"),
            store_path=options.get("store_path"),
            store_url=options.get("store_url"),
            config_path=options.get("config_path"),
        )
    except RuntimeError as exc:
        raise typer.BadParameter(str(exc)) from exc
    service = create_service(config)

    def _cleanup() -> None:
        service.store.close()

    return service, _cleanup


def _format_record(record: SluggableRecord, *, title: str) -> None:
    table = Table(title=title)
    table.add_column("Locale")
    table.add_column("Slug")
    table.add_column("Title")
    for translation in record.translations:
        table.add_row(translation.locale, translation.slug or "-", translation.title or "")
    console.print(table)


def _fail(exc: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {exc}")
    raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a configuration TOML file",
    ),
    default_locale: Optional[str] = typer.Option(None, "--default-locale", help="Fallback locale for lookups"),
    backend: Optional[str] = typer.Option(None, "--backend", help="Store backend: memory, files or sql"),
    store_path: Optional[Path] = typer.Option(None, "--store-path", help="Directory used by the files backend"),
    store_url: Optional[str] = typer.Option(None, "--store-url", help="Database URL used by the sql backend"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log slug assignments"),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(message)s", handlers=[RichHandler(console=console)])
    ctx.obj = {
        "config_path": config_path,
        "default_locale": default_locale,
        "backend": backend,
        "store_path": store_path,
        "store_url": store_url,
    }


@app.command()
def create(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Title the slug is generated from"),
    locale: Optional[str] = LOCALE_OPTION,
) -> None:
    """Create a record with a slug in a single locale."""

    service, cleanup = _build_service(ctx)
    try:
        record = service.create(title, locale=locale)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    except SlugError as exc:
        _fail(exc)
    finally:
        cleanup()
    _format_record(record, title=f"Record {record.id}")


@app.command()
def translate(
    ctx: typer.Context,
    record_id: str = typer.Argument(..., help="Primary key of the record"),
    title: str = typer.Argument(..., help="Translated title"),
    locale: Optional[str] = LOCALE_OPTION,
) -> None:
    """Set a record's title in a locale, generating the slug if it has none there."""

    service, cleanup = _build_service(ctx)
    try:
        translation = service.save_translation(record_id, title, locale=locale)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    except SlugError as exc:
        _fail(exc)
    finally:
        cleanup()
    console.print(f"[bold]{translation.locale}[/bold]: {translation.slug}")


@app.command("set-slug")
def set_slug(
    ctx: typer.Context,
    record_id: str = typer.Argument(..., help="Primary key of the record"),
    text: str = typer.Argument(..., help="Text the slug is derived from"),
    locale: Optional[str] = LOCALE_OPTION,
) -> None:
    """Assign an explicit slug to a record in a locale."""

    service, cleanup = _build_service(ctx)
    try:
        translation = service.set_friendly_id(record_id, text, locale=locale)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    except SlugError as exc:
        _fail(exc)
    finally:
        cleanup()
    console.print(f"[bold]{translation.locale}[/bold]: {translation.slug}")


@app.command()
def find(
    ctx: typer.Context,
    identifier: str = typer.Argument(..., help="Slug or primary key"),
    locale: Optional[str] = LOCALE_OPTION,
) -> None:
    """Find a record by slug, falling back to the default locale and then the primary key."""

    service, cleanup = _build_service(ctx)
    try:
        record = service.find(identifier, locale=locale)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    except SlugError as exc:
        _fail(exc)
    finally:
        cleanup()
    _format_record(record, title=f"Record {record.id}")


@app.command("next-slug")
def next_slug(
    ctx: typer.Context,
    text: str = typer.Argument(..., help="Text the slug is derived from"),
    locale: Optional[str] = LOCALE_OPTION,
    exclude: Optional[str] = typer.Option(None, "--exclude", help="Record being updated"),
) -> None:
    """Print the slug the given text would receive without storing it."""

    service, cleanup = _build_service(ctx)
    try:
        assignment = service.preview_slug(text, locale=locale, exclude_record_id=exclude)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    finally:
        cleanup()
    console.print(assignment.slug)


@app.command()
def delete(
    ctx: typer.Context,
    record_id: str = typer.Argument(..., help="Primary key of the record"),
) -> None:
    """Delete a record together with all of its translations."""

    service, cleanup = _build_service(ctx)
    try:
        service.delete(record_id)
    except SlugError as exc:
        _fail(exc)
    finally:
        cleanup()
    console.print(f"Deleted record [bold]{record_id}[/bold].")


def run() -> None:
    """Entry point for console scripts."""

    app()


if __name__ == "__main__":  # pragma: no cover
    run()
