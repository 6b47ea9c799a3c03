"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from collections.abc import Iterable

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import PkgSummary, Stack


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("pkgstack", style="bold cyan")
    subtitle = Text("Packages • Stacks • /api/v2/packages", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_stacks_table(stacks: Iterable[Stack], *, title: str = "Stacks") -> Table:
    table = Table(title=title)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Description", style="dim")
    table.add_column("URLs", style="magenta")
    table.add_column("Resources", style="green", justify="right")
    for stack in stacks:
        table.add_row(
            stack.id or "",
            stack.name or "",
            stack.description or "",
            "\n".join(stack.urls),
            str(len(stack.resources)),
        )
    return table


def build_summary_panel(summary: PkgSummary, *, dry_run: bool = False) -> Panel:
    """Panel con el resultado de `apply_pkg` (recuento por tipo de recurso)."""

    title = Text("Dry run" if dry_run else "Package applied", style="bold yellow")
    body = Text()
    if summary.summary:
        for kind, items in sorted(summary.summary.items()):
            count = len(items) if isinstance(items, list) else 1
            body.append(f"{kind}: {count}\n")
    else:
        body.append("No resources.\n", style="dim")
    if summary.errors:
        body.append(f"\nErrors: {len(summary.errors)}", style="bold red")
    return Panel(body, title=title, border_style="red" if summary.errors else "yellow")
