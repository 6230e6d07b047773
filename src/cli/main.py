"""CLI principal (Typer).

Comandos:
- `compile`: una fuente, una plataforma, una etapa.
- `build`: una fuente para varios targets `Plataforma[:Etapa]` + reporte JSON.
- `profiles`: muestra las tablas de traducción a shaderc.
- `doctor`: diagnóstico del entorno (ver `cli.doctor`).
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from adapters.bgfx_shaderc import BgfxShaderCompiler
from adapters.json_exporter import export_report_json
from adapters.shaderc_locator import ShadercNotFoundError
from cli import doctor
from cli.ui_components import build_profiles_table, build_report_table, print_banner
from core.config import ENV_PREFIX, AppSettings
from core.domain.models import CompileRequest, Defines, ShaderCodePlatform, ShaderStage
from core.log import configure_logging
from core.services.compile_pipeline import (
    CompileTarget,
    PipelineHooks,
    PipelineRequest,
    output_name,
    parse_target,
    run_pipeline,
)

logger = logging.getLogger(__name__)

app = typer.Typer(
    no_args_is_help=True,
    help="Build bgfx shaderc command lines and run the compiler.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging (shows shaderc command lines)."),
) -> None:
    settings = _load_settings()
    configure_logging("DEBUG" if verbose else settings.log_level, console=_err_console)


def _fail(message: object, code: int) -> typer.Exit:
    _err_console.print(f"[red]Error:[/red] {escape(str(message))}")
    return typer.Exit(code=code)


def _load_settings() -> AppSettings:
    try:
        return AppSettings()
    except ValidationError as exc:
        raise _fail(f"invalid configuration ({ENV_PREFIX}*):\n{exc}", 2) from exc


def _parse_defines(values: list[str]) -> Defines:
    defines = Defines()
    for value in values:
        parsed = Defines.parse(value)
        for name in parsed.names():
            defines.add(name, parsed.get(name))
    return defines


def _parse_platform(value: str) -> ShaderCodePlatform:
    try:
        return ShaderCodePlatform.parse(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--platform") from exc


def _parse_stage(value: str) -> ShaderStage:
    try:
        return ShaderStage.parse(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--stage") from exc


def _build_compiler(
    *,
    compiler: Path | None,
    includes: list[Path],
    optimization: int | None,
) -> BgfxShaderCompiler:
    settings = _load_settings()
    if optimization is not None:
        settings = settings.model_copy(update={"optimization_level": optimization})
    try:
        shader_compiler = BgfxShaderCompiler.from_settings(settings, compiler_path=compiler)
    except ShadercNotFoundError as exc:
        raise _fail(exc, 2) from exc
    for include in includes:
        shader_compiler.add_include_path(include)
    return shader_compiler


def _exit_code(code: int) -> int:
    # Los códigos negativos (-1 = no se pudo lanzar, -N = señal) no son válidos como exit status.
    return code if code >= 0 else 1


@app.command("compile")
def compile_command(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, help="Shader source (.sc)."),
    varying_def: Path = typer.Option(..., "--varying-def", exists=True, dir_okay=False, help="varying.def.sc file."),
    platform: str = typer.Option(..., "--platform", "-p", help="Shader code platform (e.g. Vulkan, Direct3D_SM50)."),
    stage: str = typer.Option("Fragment", "--stage", "-s", help="Vertex, Fragment or Compute."),
    define: list[str] = typer.Option([], "--define", "-D", help="Define (NAME or NAME=VALUE, ';' allowed). Repeatable."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output file. Defaults to a file next to the source."),
    include: list[Path] = typer.Option([], "--include", "-i", help="Include path. Repeatable."),
    compiler: Path | None = typer.Option(None, "--compiler", help="Path to shaderc."),
    optimization: int | None = typer.Option(None, "-O", min=0, max=3, help="Optimization level."),
) -> None:
    """Compile one shader for one platform and stage."""

    request = CompileRequest(
        input=source,
        varying_def=varying_def,
        defines=_parse_defines(define),
        platform=_parse_platform(platform),
        stage=_parse_stage(stage),
    )

    with _build_compiler(compiler=compiler, includes=include, optimization=optimization) as shader_compiler:
        if output is not None:
            try:
                output.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise _fail(exc, 1) from exc
            code = shader_compiler.compile_to(request, output)
            if code != 0:
                _err_console.print(f"[red]shaderc failed[/red] (exit code {code})")
                raise typer.Exit(code=_exit_code(code))
            _console.print(f"[green]Compiled:[/green] {output}")
            return

        data = shader_compiler.compile(request)

    if data is None:
        _err_console.print("[red]shaderc failed[/red] (no output produced)")
        raise typer.Exit(code=1)

    target = CompileTarget(platform=request.platform, stage=request.stage)
    destination = source.parent / output_name(source, target)
    try:
        destination.write_bytes(data)
    except OSError as exc:
        raise _fail(exc, 1) from exc
    _console.print(f"[green]Compiled:[/green] {destination} ({len(data)} bytes)")


@app.command()
def build(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, help="Shader source (.sc)."),
    varying_def: Path = typer.Option(..., "--varying-def", exists=True, dir_okay=False, help="varying.def.sc file."),
    target: list[str] = typer.Option(..., "--target", "-t", help="Platform[:Stage]. Repeatable."),
    out_dir: Path = typer.Option(Path("build/shaders"), "--out-dir", help="Output directory."),
    define: list[str] = typer.Option([], "--define", "-D", help="Define (NAME or NAME=VALUE). Repeatable."),
    include: list[Path] = typer.Option([], "--include", "-i", help="Include path. Repeatable."),
    compiler: Path | None = typer.Option(None, "--compiler", help="Path to shaderc."),
    optimization: int | None = typer.Option(None, "-O", min=0, max=3, help="Optimization level."),
    report: Path | None = typer.Option(None, "--report", help="Write a JSON report to this path."),
    strict: bool = typer.Option(False, "--strict", help="Compile platforms without a shaderc backend instead of skipping them."),
    banner: bool = typer.Option(True, "--banner/--no-banner", help="Show the banner."),
) -> None:
    """Compile one shader for several platform/stage targets."""

    try:
        targets = [parse_target(value) for value in target]
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--target") from exc

    if banner:
        print_banner(_console)

    hooks = PipelineHooks(
        warning=lambda message: _err_console.print(f"[yellow]Warning:[/yellow] {message}"),
        target_start=lambda t: _console.print(f"[dim]-> {t.label()}[/dim]"),
    )

    request = PipelineRequest(
        source=source,
        varying_def=varying_def,
        targets=targets,
        output_dir=out_dir,
        defines=_parse_defines(define),
        skip_unsupported=not strict,
    )

    with _build_compiler(compiler=compiler, includes=include, optimization=optimization) as shader_compiler:
        try:
            result = run_pipeline(compiler=shader_compiler, request=request, hooks=hooks)
        except OSError as exc:
            raise _fail(exc, 1) from exc

    _console.print(build_report_table(result))

    if report is not None:
        try:
            path = export_report_json(report=result, output_path=report)
        except OSError as exc:
            raise _fail(f"could not write report: {exc}", 1) from exc
        _console.print(f"[green]Report:[/green] {path}")

    if result.failed:
        raise typer.Exit(code=1)


@app.command()
def profiles() -> None:
    """Show the platform/stage -> shaderc translation tables."""

    _console.print(build_profiles_table())


def run() -> None:
    app()


if __name__ == "__main__":
    run()
