"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from adapters.signed_fetcher import AttemptBudget, SignedFetcher
from core.config import AppSettings, write_user_env_vars
from core.domain.results import FetchFailure
from core.services.form_aggregator import FORMS_LISTING_ROUTE

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(settings: AppSettings, url: str) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get(url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc)


async def _check_signed_listing(settings: AppSettings) -> tuple[bool, str]:
    """One signed listing call, no retries: the doctor must answer fast."""

    credentials = settings.api_credentials()
    if settings.base_url is None or credentials is None:
        return False, "missing base URL or API credentials"

    async with build_async_client(settings) as client:
        fetcher = SignedFetcher(client, budget=AttemptBudget(1), retry_delay_seconds=0)
        result = await fetcher.get(
            base_url=settings.base_url,
            route=FORMS_LISTING_ROUTE,
            credentials=credentials,
            basic_auth=settings.basic_auth(),
        )

    if isinstance(result, FetchFailure):
        return False, result.detail or result.message
    count = len(result.value) if isinstance(result.value, (dict, list)) else 0
    return True, f"{count} form(s) listed"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="GF-Forms Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    if settings.base_url:
        table.add_row("Base URL", "OK", settings.base_url)
    else:
        table.add_row("Base URL", "MISSING", "Set GF_FORMS_BASE_URL or run `doctor setup`")
    if settings.api_credentials() is not None:
        table.add_row("API credentials", "OK", "Consumer key/secret set")
    else:
        table.add_row("API credentials", "MISSING", "Set GF_FORMS_API_KEY and GF_FORMS_API_SECRET")
    if settings.basic_auth() is not None:
        table.add_row("Basic auth", "OK", settings.basic_auth_username or "")
    else:
        table.add_row("Basic auth", "OPTIONAL", "Not configured")

    # Connectivity (best-effort)
    if settings.base_url:
        ok_http, detail_http = asyncio.run(_check_http(settings, settings.base_url))
        table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)

    ok_api, detail_api = asyncio.run(_check_signed_listing(settings))
    table.add_row("Signed forms listing", "OK" if ok_api else "FAIL", detail_api)

    _console.print(table)


@app.command(name="setup")
def setup() -> None:
    """Interactive setup (stores config in the user config .env)."""

    base_url = typer.prompt("Site base URL (e.g. https://example.com)").strip().rstrip("/")
    api_key = typer.prompt("Gravity Forms consumer key").strip()
    api_secret = typer.prompt("Gravity Forms consumer secret", hide_input=True).strip()
    basic_user = typer.prompt("HTTP Basic username (optional)", default="", show_default=False).strip()
    basic_password = ""
    if basic_user:
        basic_password = typer.prompt("HTTP Basic password", hide_input=True, default="", show_default=False)

    if not base_url or not api_key or not api_secret:
        raise typer.BadParameter("base URL, consumer key and consumer secret are required")

    env_path = write_user_env_vars(
        {
            "GF_FORMS_BASE_URL": base_url,
            "GF_FORMS_API_KEY": api_key,
            "GF_FORMS_API_SECRET": api_secret,
            "GF_FORMS_BASIC_AUTH_USERNAME": basic_user or None,
            "GF_FORMS_BASIC_AUTH_PASSWORD": basic_password or None,
        }
    )

    _console.print(f"[green]Saved config to:[/green] {env_path}")
