"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import httpx
import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from core.config import AppSettings, write_user_env_vars

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get("/health")
        return response.is_success, f"HTTP {response.status_code}"
    except httpx.HTTPError as exc:
        return False, str(exc) or exc.__class__.__name__


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="pkgstack Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("Server URL", "OK", settings.url)
    if settings.token:
        table.add_row("API token", "OK", "Authorization header enabled")
    else:
        table.add_row("API token", "MISSING", "Set PKGSTACK_TOKEN or run `doctor setup`")
    if settings.org_id:
        table.add_row("Default org", "OK", settings.org_id)
    else:
        table.add_row("Default org", "OPTIONAL", "Pass --org on each command")

    # Connectivity (best-effort)
    ok_http, detail_http = asyncio.run(_check_http(settings))
    table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if not ok_http:
        raise typer.Exit(code=1)


@app.command(name="setup")
def setup() -> None:
    """Interactive setup (stores config in the user config .env)."""

    settings = AppSettings()

    url = typer.prompt("Server URL", default=settings.url, show_default=True).strip()
    org_id = typer.prompt("Default organization ID", default=settings.org_id or "", show_default=True).strip()
    token = typer.prompt("API token", hide_input=True, confirmation_prompt=False).strip()

    if not url or not token:
        raise typer.BadParameter("url and token are required")

    env_path = write_user_env_vars(
        {
            "PKGSTACK_URL": url,
            "PKGSTACK_TOKEN": token,
            "PKGSTACK_ORG_ID": org_id or None,
        }
    )

    _console.print(f"[green]Saved config to:[/green] {env_path}")
