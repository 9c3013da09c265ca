"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.results import FetchFailure


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida.

    Por qué aquí:
    - Evita dependencias circulares (main <-> doctor).
    - Permite desactivar banner en modos no interactivos (JSON/pipelines).
    """

    title = Text("GF-FORMS", style="bold cyan")
    subtitle = Text("Gravity Forms • Formularios y campos vía REST API", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_forms_table(forms: Mapping[str, Any]) -> Table:
    """Tabla Rich con una fila por formulario (detalle o fallo)."""

    table = Table(title="Forms")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Slug", style="magenta")
    table.add_column("Fields", style="green", justify="right")
    table.add_column("Status", style="white")

    for key, entry in forms.items():
        if isinstance(entry, FetchFailure):
            status = f"[red]{entry.kind.value}[/red]"
            if entry.status_code is not None:
                status += f" ({entry.status_code})"
            table.add_row(key, "-", "-", "-", status)
            continue

        fields = entry.get("fields")
        field_count = str(len(fields)) if isinstance(fields, list) else "-"
        table.add_row(
            key,
            str(entry.get("title", "")),
            str(entry.get("slug", "")),
            field_count,
            "[green]OK[/green]",
        )
    return table


def build_failure_panel(failure: FetchFailure) -> Panel:
    """Panel para un fallo terminal del listado."""

    body = Text()
    body.append(failure.message + "\n", style="bold")
    if failure.detail:
        body.append(failure.detail + "\n")
    body.append(failure.url, style="dim")
    return Panel(body, title=Text("Fetch failed", style="bold red"), border_style="red")
