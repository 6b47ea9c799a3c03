"""CLI principal (Typer).

Por qué una CLI fina:
- Cada comando construye el request tipado, llama a `PackagesAPI` y pinta
  el resultado con Rich; no hay lógica de negocio aquí.
- Los errores del transporte se traducen a un mensaje y exit code 1 solo en
  este borde.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated, Any, List, Optional, TypeVar

import httpx
import typer
from pydantic import BaseModel, ValidationError
from rich.console import Console

from adapters.http_client import APIBase, APIError
from adapters.json_exporter import export_model_json, load_json_file
from adapters.packages_api import PackagesAPI
from cli import doctor
from cli.ui_components import build_stacks_table, build_summary_panel, print_banner
from core.config import AppSettings
from core.domain.models import (
    ApplyPkgRequest,
    CreatePkgRequest,
    CreateStackRequest,
    DeleteStackRequest,
    ExportStackRequest,
    ListStacksRequest,
    Pkg,
    PkgApply,
    PkgCreate,
    ReadStackRequest,
    StackCreate,
    StackUpdate,
    UpdateStackRequest,
)
from core.logging import setup_logging

T = TypeVar("T")

app = typer.Typer(no_args_is_help=True, help="Client for the /api/v2/packages endpoints.")
pkg_app = typer.Typer(no_args_is_help=True, help="Create and apply packages.")
stacks_app = typer.Typer(no_args_is_help=True, help="Manage installed stacks.")
app.add_typer(pkg_app, name="pkg")
app.add_typer(stacks_app, name="stacks")
app.add_typer(doctor.app, name="doctor")

_console = Console()

OrgOption = Annotated[
    Optional[str],
    typer.Option("--org", help="Organization ID (defaults to PKGSTACK_ORG_ID)."),
]
JsonFlag = Annotated[bool, typer.Option("--json", help="Print raw JSON instead of a table.")]


def _open_transport(settings: AppSettings) -> APIBase:
    return APIBase(settings)


def _resolve_org(org: str | None, settings: AppSettings) -> str:
    resolved = org or settings.org_id
    if not resolved:
        raise typer.BadParameter(
            "organization is required (use --org or set PKGSTACK_ORG_ID)",
            param_hint="--org",
        )
    return resolved


def _call(operation: Callable[[PackagesAPI], Awaitable[T]], settings: AppSettings) -> T:
    """Abre el transporte, ejecuta una operación y lo cierra."""

    async def _runner() -> T:
        async with _open_transport(settings) as base:
            return await operation(PackagesAPI(base))

    try:
        return asyncio.run(_runner())
    except APIError as exc:
        _console.print(f"[red]API error:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    except httpx.HTTPError as exc:
        _console.print(f"[red]Connection error:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    except ValidationError as exc:
        _console.print(f"[red]Unexpected response:[/red] {exc}")
        raise typer.Exit(code=1) from exc


def _read_body(path: Path) -> Any:
    try:
        return load_json_file(path)
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(f"cannot read {path}: {exc}", param_hint="--file") from exc


def _print_model(model: BaseModel) -> None:
    _console.print_json(data=model.model_dump(mode="json", by_alias=True, exclude_none=True))


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
    banner: Annotated[bool, typer.Option("--banner", help="Show the welcome banner.")] = False,
) -> None:
    settings = AppSettings()
    if verbose:
        settings = settings.model_copy(update={"log_level": "DEBUG"})
    setup_logging(settings)
    if banner:
        print_banner(_console)


@pkg_app.command("create")
def pkg_create(
    file: Annotated[Path, typer.Option("--file", "-f", help="JSON file with the package definition.")],
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Write the package here.")] = None,
) -> None:
    """Create a new package from existing resources."""

    settings = AppSettings()
    try:
        body = PkgCreate.model_validate(_read_body(file))
    except ValidationError as exc:
        raise typer.BadParameter(str(exc), param_hint="--file") from exc

    pkg = _call(lambda api: api.create_pkg(CreatePkgRequest(body=body)), settings)
    if output:
        path = export_model_json(model=pkg, output_path=output)
        _console.print(f"[green]Package written to:[/green] {path}")
    else:
        _print_model(pkg)


@pkg_app.command("apply")
def pkg_apply(
    file: Annotated[Path, typer.Option("--file", "-f", help="JSON package, or a full apply body.")],
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Evaluate without persisting.")] = False,
    org: OrgOption = None,
    stack_id: Annotated[Optional[str], typer.Option("--stack-id", help="Associate with this stack.")] = None,
    as_json: JsonFlag = False,
) -> None:
    """Apply or dry-run a package."""

    settings = AppSettings()
    raw = _read_body(file)
    try:
        if isinstance(raw, list):
            body = PkgApply(package=Pkg.model_validate(raw))
        else:
            body = PkgApply.model_validate(raw)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc), param_hint="--file") from exc

    updates: dict[str, Any] = {"org_id": org or body.org_id or _resolve_org(None, settings)}
    if dry_run:
        updates["dry_run"] = True
    if stack_id:
        updates["stack_id"] = stack_id
    body = body.model_copy(update=updates)

    summary = _call(lambda api: api.apply_pkg(ApplyPkgRequest(body=body)), settings)
    if as_json:
        _print_model(summary)
    else:
        _console.print(build_summary_panel(summary, dry_run=bool(body.dry_run)))
    if summary.errors:
        raise typer.Exit(code=1)


@stacks_app.command("list")
def stacks_list(
    org: OrgOption = None,
    name: Annotated[Optional[str], typer.Option("--name", help="Filter by name.")] = None,
    stack_id: Annotated[Optional[str], typer.Option("--stack-id", help="Filter by stack ID.")] = None,
    as_json: JsonFlag = False,
) -> None:
    """List installed stacks."""

    settings = AppSettings()
    request = ListStacksRequest(org_id=_resolve_org(org, settings), name=name, stack_id=stack_id)
    result = _call(lambda api: api.list_stacks(request), settings)
    if as_json:
        _print_model(result)
    else:
        _console.print(build_stacks_table(result.stacks))


@stacks_app.command("create")
def stacks_create(
    name: Annotated[str, typer.Option("--name", help="Stack name.")],
    description: Annotated[Optional[str], typer.Option("--description", help="Stack description.")] = None,
    urls: Annotated[Optional[List[str]], typer.Option("--url", help="Package URL (repeatable).")] = None,
    org: OrgOption = None,
) -> None:
    """Create a new stack."""

    settings = AppSettings()
    body = StackCreate(
        org_id=_resolve_org(org, settings),
        name=name,
        description=description,
        urls=urls or None,
    )
    stack = _call(lambda api: api.create_stack(CreateStackRequest(body=body)), settings)
    _console.print(build_stacks_table([stack], title="Created stack"))


@stacks_app.command("read")
def stacks_read(stack_id: str, as_json: JsonFlag = False) -> None:
    """Show a stack by its ID."""

    settings = AppSettings()
    stack = _call(lambda api: api.read_stack(ReadStackRequest(stack_id=stack_id)), settings)
    if as_json:
        _print_model(stack)
    else:
        _console.print(build_stacks_table([stack], title="Stack"))


@stacks_app.command("update")
def stacks_update(
    stack_id: str,
    name: Annotated[Optional[str], typer.Option("--name", help="New name.")] = None,
    description: Annotated[Optional[str], typer.Option("--description", help="New description.")] = None,
    urls: Annotated[Optional[List[str]], typer.Option("--url", help="Replace package URLs (repeatable).")] = None,
) -> None:
    """Update a stack's name, description or URLs."""

    settings = AppSettings()
    body = StackUpdate(name=name, description=description, urls=urls or None)
    request = UpdateStackRequest(stack_id=stack_id, body=body)
    stack = _call(lambda api: api.update_stack(request), settings)
    _console.print(build_stacks_table([stack], title="Updated stack"))


@stacks_app.command("delete")
def stacks_delete(
    stack_id: str,
    org: OrgOption = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation.")] = False,
) -> None:
    """Delete a stack and remove all its associated resources."""

    settings = AppSettings()
    request = DeleteStackRequest(stack_id=stack_id, org_id=_resolve_org(org, settings))
    if not yes:
        typer.confirm(f"Delete stack {stack_id} and all its resources?", abort=True)
    _call(lambda api: api.delete_stack(request), settings)
    _console.print(f"[green]Deleted stack[/green] {stack_id}")


@stacks_app.command("export")
def stacks_export(
    stack_id: str,
    org: OrgOption = None,
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Write the package here.")] = None,
) -> None:
    """Export a stack's resources as a package."""

    settings = AppSettings()
    request = ExportStackRequest(stack_id=stack_id, org_id=_resolve_org(org, settings))
    pkg = _call(lambda api: api.export_stack(request), settings)
    if output:
        path = export_model_json(model=pkg, output_path=output)
        _console.print(f"[green]Package written to:[/green] {path}")
    else:
        _print_model(pkg)


def run() -> None:
    app(prog_name="pkgstack")
