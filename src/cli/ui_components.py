"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import CompileReport, ShaderStage
from core.domain.profiles import profile_table


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("shaderc-bridge", style="bold cyan")
    subtitle = Text("bgfx shaderc • Materiales • Multi-plataforma", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_report_table(report: CompileReport) -> Table:
    """Tabla con el resultado de cada target del pipeline."""

    table = Table(title=f"Build: {report.source.name}")
    table.add_column("Platform", style="cyan", no_wrap=True)
    table.add_column("Stage", style="white")
    table.add_column("Status")
    table.add_column("Size", justify="right")
    table.add_column("Output", style="magenta")

    for outcome in report.outcomes:
        if outcome.skipped:
            status = "[yellow]SKIPPED[/yellow]"
        elif outcome.exit_code == 0:
            status = "[green]OK[/green]"
        else:
            status = f"[red]FAIL ({outcome.exit_code})[/red]"
        table.add_row(
            outcome.platform.value,
            outcome.stage.value,
            status,
            str(outcome.size) if outcome.output else "-",
            str(outcome.output) if outcome.output else "",
        )
    return table


def build_profiles_table() -> Table:
    """Tabla con las traducciones plataforma/etapa -> shaderc."""

    table = Table(title="shaderc platforms & profiles")
    table.add_column("Platform", style="cyan", no_wrap=True)
    table.add_column("--platform", style="white")
    for stage in (ShaderStage.Vertex, ShaderStage.Fragment, ShaderStage.Compute):
        table.add_column(f"--profile ({stage.value.lower()})", style="magenta")

    for platform, backend, profiles in profile_table():
        table.add_row(
            platform.value,
            backend or "[dim]-[/dim]",
            profiles[ShaderStage.Vertex] or "[dim]-[/dim]",
            profiles[ShaderStage.Fragment] or "[dim]-[/dim]",
            profiles[ShaderStage.Compute] or "[dim]-[/dim]",
        )
    return table
