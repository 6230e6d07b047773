"""Doctor command for environment diagnostics."""

from __future__ import annotations

import subprocess
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from adapters.bgfx_shaderc import BgfxShaderCompiler
from adapters.shaderc_locator import ShadercNotFoundError, find_shaderc, is_executable
from core.config import ENV_PREFIX, AppSettings, get_user_env_file, write_user_env_vars

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_compiler(settings: AppSettings) -> tuple[bool, str]:
    try:
        path = find_shaderc(settings.compiler_path)
    except ShadercNotFoundError as exc:
        return False, str(exc)
    if not is_executable(path):
        return False, f"{path} is not executable"
    return True, str(path)


def _check_compiler_runs(path: str) -> tuple[bool, str]:
    """Run `shaderc --version` to make sure the binary actually starts."""

    try:
        completed = subprocess.run(
            [path, "--version"],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        return False, str(exc)
    first_line = (completed.stdout or completed.stderr).strip().splitlines()
    return True, first_line[0] if first_line else f"exit code {completed.returncode}"


def _check_temp_dir(settings: AppSettings) -> tuple[bool, str]:
    compiler = BgfxShaderCompiler("shaderc", temp_dir_prefix=settings.temp_dir_prefix)
    try:
        probe = compiler.temp_dir / "probe"
        probe.write_bytes(b"ok")
        return True, str(compiler.temp_dir.parent)
    except OSError as exc:
        return False, str(exc)
    finally:
        compiler.close()


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="shaderc-bridge Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    ok_compiler, detail_compiler = _check_compiler(settings)
    table.add_row("shaderc", "OK" if ok_compiler else "FAIL", detail_compiler)

    if ok_compiler:
        ok_run, detail_run = _check_compiler_runs(detail_compiler)
        table.add_row("shaderc launch", "OK" if ok_run else "FAIL", detail_run)

    for include_path in settings.include_paths:
        exists = Path(include_path).is_dir()
        table.add_row("Include path", "OK" if exists else "MISSING", str(include_path))

    ok_tmp, detail_tmp = _check_temp_dir(settings)
    table.add_row("Temp dir", "OK" if ok_tmp else "FAIL", detail_tmp)

    table.add_row("Optimization", "OK", f"-O {settings.optimization_level}")
    table.add_row("User config", "OK", str(get_user_env_file()))

    _console.print(table)

    if not ok_compiler:
        _console.print(
            "\n[yellow]Note:[/yellow] run `shaderc-bridge doctor setup` or pass `--compiler` "
            "to point at your shaderc build."
        )
        raise typer.Exit(code=1)


@app.command()
def setup() -> None:
    """Interactive setup (stores config in the user config .env)."""

    default = ""
    try:
        default = str(find_shaderc())
    except ShadercNotFoundError:
        pass

    compiler = typer.prompt("shaderc path", default=default, show_default=True).strip()
    if not compiler:
        raise typer.BadParameter("shaderc path is required")
    try:
        resolved = find_shaderc(compiler)
    except ShadercNotFoundError as exc:
        raise typer.BadParameter(str(exc)) from exc

    includes = typer.prompt(
        "Include paths (separated by your OS path separator)",
        default="",
        show_default=False,
    ).strip()

    env_path = write_user_env_vars(
        {
            f"{ENV_PREFIX}COMPILER_PATH": str(resolved),
            f"{ENV_PREFIX}INCLUDE_PATHS": includes or None,
        }
    )

    _console.print(f"[green]Saved config to:[/green] {env_path}")
