"""Multi-target compilation orchestration.

A material usually ships the same shader source compiled for several
platforms and stages. This module runs one source through a list of
`(platform, stage)` targets, sequentially, and collects the outcome of each
into a `CompileReport`. Side-effects for the UI (progress, warnings) go
through `PipelineHooks` so the CLI stays a thin layer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence

from core.domain.models import (
    CompileOutcome,
    CompileReport,
    CompileRequest,
    Defines,
    ShaderCodePlatform,
    ShaderStage,
)
from core.domain.profiles import is_supported
from core.interfaces.compiler import ShaderCompiler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompileTarget:
    platform: ShaderCodePlatform
    stage: ShaderStage = ShaderStage.Fragment

    def label(self) -> str:
        return f"{self.platform.value}:{self.stage.value}"


@dataclass
class PipelineRequest:
    """Parameters that control a pipeline run."""

    source: Path
    varying_def: Path
    targets: Sequence[CompileTarget]
    output_dir: Path
    defines: Defines = field(default_factory=Defines)
    skip_unsupported: bool = True


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers (progress, warnings)."""

    warning: Callable[[str], None] | None = None
    target_start: Callable[[CompileTarget], None] | None = None
    target_done: Callable[[CompileTarget, CompileOutcome], None] | None = None


def parse_target(value: str) -> CompileTarget:
    """Parse `Platform[:Stage]` (case-insensitive, stage defaults to Fragment)."""

    platform_part, sep, stage_part = value.strip().partition(":")
    if not platform_part:
        raise ValueError(f"Empty platform in target {value!r}")
    platform = ShaderCodePlatform.parse(platform_part)
    stage = ShaderStage.parse(stage_part) if sep and stage_part else ShaderStage.Fragment
    return CompileTarget(platform=platform, stage=stage)


def output_name(source: Path, target: CompileTarget) -> str:
    return f"{source.stem}.{target.platform.value}.{target.stage.value}.bin"


def dedupe_targets(targets: Sequence[CompileTarget]) -> list[CompileTarget]:
    """Remove duplicated targets keeping the first occurrence."""

    seen: set[CompileTarget] = set()
    out: list[CompileTarget] = []
    for target in targets:
        if target in seen:
            continue
        seen.add(target)
        out.append(target)
    return out


def run_pipeline(
    *,
    compiler: ShaderCompiler,
    request: PipelineRequest,
    hooks: PipelineHooks | None = None,
) -> CompileReport:
    hooks = hooks or PipelineHooks()

    for path in (request.source, request.varying_def):
        if not path.is_file():
            raise FileNotFoundError(f"No such file: {path}")

    request.output_dir.mkdir(parents=True, exist_ok=True)

    report = CompileReport(
        source=request.source,
        varying_def=request.varying_def,
        defines=str(request.defines),
    )

    def warn(message: str) -> None:
        logger.warning(message)
        report.warnings.append(message)
        if hooks.warning:
            hooks.warning(message)

    for target in dedupe_targets(request.targets):
        if hooks.target_start:
            hooks.target_start(target)

        if not is_supported(target.platform):
            if request.skip_unsupported:
                warn(f"Skipping {target.label()}: platform has no shaderc backend.")
                outcome = CompileOutcome(
                    platform=target.platform,
                    stage=target.stage,
                    exit_code=0,
                    skipped=True,
                )
                report.outcomes.append(outcome)
                if hooks.target_done:
                    hooks.target_done(target, outcome)
                continue
            warn(f"{target.label()}: platform has no shaderc backend, compiling anyway.")

        output = request.output_dir / output_name(request.source, target)
        compile_request = CompileRequest(
            input=request.source,
            varying_def=request.varying_def,
            defines=request.defines.copy(),
            platform=target.platform,
            stage=target.stage,
        )
        code = compiler.compile_to(compile_request, output)

        produced = code == 0 and output.is_file()
        if code == 0 and not produced:
            warn(f"{target.label()}: compiler succeeded but {output.name} is missing.")
            code = 1

        outcome = CompileOutcome(
            platform=target.platform,
            stage=target.stage,
            exit_code=code,
            output=output if produced else None,
            size=output.stat().st_size if produced else 0,
        )
        report.outcomes.append(outcome)
        if hooks.target_done:
            hooks.target_done(target, outcome)

    return report
