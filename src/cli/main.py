"""CLI principal (Typer).

Por qué Typer + Rich:
- Typer da parsing tipado de opciones sin boilerplate.
- Rich separa la presentación (tablas/paneles/logs) de la lógica del Core.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from adapters.http_client import build_async_client
from adapters.signed_fetcher import AttemptBudget, SignedFetcher
from cli import doctor
from cli.ui_components import build_failure_panel, build_forms_table, print_banner
from core.config import AppSettings
from core.domain.models import AggregationFilters, ApiCredentials, BasicAuthCredentials
from core.domain.results import FetchFailure, FetchResult
from core.services.form_aggregator import FormAggregator

app = typer.Typer(no_args_is_help=True, help="Fetch Gravity Forms definitions and fields.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_err_console, show_path=False)],
        force=True,
    )
    # httpx loguea cada request en INFO; solo interesa en modo verbose.
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def _load_settings() -> AppSettings:
    return AppSettings()


async def collect_forms(
    *,
    settings: AppSettings,
    base_url: str,
    credentials: ApiCredentials,
    basic_auth: BasicAuthCredentials | None,
    filters: AggregationFilters,
) -> FetchResult:
    """Ejecuta una agregación completa con un cliente HTTP de vida corta."""

    async with build_async_client(settings) as client:
        fetcher = SignedFetcher(
            client,
            budget=AttemptBudget(settings.max_global_attempts),
            retry_delay_seconds=settings.retry_delay_seconds,
        )
        aggregator = FormAggregator(fetcher)
        return await aggregator.collect(
            basic_auth=basic_auth,
            credentials=credentials,
            base_url=base_url,
            filters=filters,
        )


def forms_to_jsonable(forms: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, entry in forms.items():
        if isinstance(entry, FetchFailure):
            out[key] = {"error": entry.to_dict()}
        else:
            out[key] = entry
    return out


@app.command()
def fetch(
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        help="Site root (overrides GF_FORMS_BASE_URL).",
    ),
    include: Optional[List[int]] = typer.Option(
        None,
        "--include",
        "-i",
        help="Only fetch these form ids (repeatable).",
    ),
    exclude: Optional[List[int]] = typer.Option(
        None,
        "--exclude",
        "-x",
        help="Never fetch these form ids (repeatable, wins over --include).",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result mapping as JSON."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
    no_banner: bool = typer.Option(False, "--no-banner", help="Skip the banner."),
) -> None:
    """List forms and fetch the field detail of each admitted form."""

    configure_logging(verbose)
    settings = _load_settings()

    effective_base_url = (base_url or settings.base_url or "").rstrip("/")
    if not effective_base_url:
        raise typer.BadParameter("a base URL is required (--base-url or GF_FORMS_BASE_URL)")

    credentials = settings.api_credentials()
    if credentials is None:
        raise typer.BadParameter("GF_FORMS_API_KEY and GF_FORMS_API_SECRET must be set")

    filters = AggregationFilters.from_lists(
        include=include or settings.include,
        exclude=exclude or settings.exclude,
    )

    if not as_json and not no_banner:
        print_banner(_console)

    result = asyncio.run(
        collect_forms(
            settings=settings,
            base_url=effective_base_url,
            credentials=credentials,
            basic_auth=settings.basic_auth(),
            filters=filters,
        )
    )

    if isinstance(result, FetchFailure):
        if as_json:
            typer.echo(json.dumps({"error": result.to_dict()}, ensure_ascii=False, indent=2))
        else:
            _console.print(build_failure_panel(result))
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(forms_to_jsonable(result.value), ensure_ascii=False, indent=2))
        return

    _console.print(build_forms_table(result.value))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
