"""
BgfxShaderCompiler: command line assembly and process handling.
"""
from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

from adapters import bgfx_shaderc
from adapters.bgfx_shaderc import LAUNCH_FAILED, BgfxShaderCompiler
from core.config import AppSettings
from core.domain.models import CompileRequest, Defines, ShaderCodePlatform, ShaderStage

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="fake shaderc is a POSIX shell script")


def _request(source: Path, varying: Path, **overrides) -> CompileRequest:
    defaults = dict(
        input=source,
        varying_def=varying,
        defines=Defines(["FOG", "LIGHTS=4"]),
        platform=ShaderCodePlatform.Direct3D_SM50,
        stage=ShaderStage.Vertex,
    )
    defaults.update(overrides)
    return CompileRequest(**defaults)


def test_build_command_order(shader_files):
    source, varying = shader_files
    compiler = BgfxShaderCompiler("/opt/bgfx/shaderc", include_paths=["inc/a"])
    compiler.add_include_path(Path("inc/b"))

    command = compiler.build_command(_request(source, varying), Path("out/vs.bin"))

    assert command == [
        "/opt/bgfx/shaderc",
        "-f", str(source.absolute()),
        "-o", str(Path("out/vs.bin")),
        "--varyingdef", str(varying.absolute()),
        "--define", "FOG;LIGHTS=4",
        "--platform", "windows",
        "--type", "vertex",
        "--profile", "vs_5_0",
        "-i", "inc/a",
        "-i", str(Path("inc/b")),
        "-O", "3",
    ]


def test_build_command_makes_input_paths_absolute(shader_files, monkeypatch):
    source, varying = shader_files
    monkeypatch.chdir(source.parent)
    compiler = BgfxShaderCompiler("shaderc", optimization_level=1)

    command = compiler.build_command(_request(Path(source.name), Path(varying.name)), "rel.bin")

    assert command[command.index("-f") + 1] == str(source.absolute())
    assert command[command.index("--varyingdef") + 1] == str(varying.absolute())
    assert command[command.index("-o") + 1] == "rel.bin"
    assert command[-2:] == ["-O", "1"]


def test_build_command_with_empty_defines_and_unknown_stage(shader_files):
    source, varying = shader_files
    compiler = BgfxShaderCompiler("shaderc")
    request = _request(
        source,
        varying,
        defines=Defines(),
        platform=ShaderCodePlatform.Vulkan,
        stage=ShaderStage.Unknown,
    )

    command = compiler.build_command(request, "x.bin")

    assert command[command.index("--define") + 1] == ""
    assert command[command.index("--type") + 1] == "fragment"
    assert command[command.index("--profile") + 1] == "spirv"
    assert "-i" not in command


def test_compile_to_propagates_exit_code(shader_files, monkeypatch):
    source, varying = shader_files
    calls = []

    def fake_run(command, check):
        calls.append(command)
        return subprocess.CompletedProcess(command, 7)

    monkeypatch.setattr(subprocess, "run", fake_run)
    compiler = BgfxShaderCompiler("shaderc")

    assert compiler.compile_to(_request(source, varying), Path("x.bin")) == 7
    assert len(calls) == 1
    assert calls[0][0] == "shaderc"


def test_compile_to_returns_minus_one_when_launch_fails(shader_files, tmp_path):
    source, varying = shader_files
    compiler = BgfxShaderCompiler(tmp_path / "does-not-exist" / "shaderc")

    assert compiler.compile_to(_request(source, varying), tmp_path / "x.bin") == LAUNCH_FAILED


def test_compile_to_does_not_launch_without_inputs(tmp_path, monkeypatch):
    def boom(*args, **kwargs):
        raise AssertionError("shaderc must not be launched")

    monkeypatch.setattr(subprocess, "run", boom)
    compiler = BgfxShaderCompiler("shaderc")
    request = _request(tmp_path / "missing.sc", tmp_path / "varying.def.sc")

    assert compiler.compile_to(request, tmp_path / "x.bin") == LAUNCH_FAILED


@posix_only
def test_compile_returns_bytes_and_cleans_temp_file(shader_files, fake_shaderc):
    source, varying = shader_files
    with BgfxShaderCompiler(fake_shaderc) as compiler:
        data = compiler.compile(_request(source, varying))
        assert data == b"BGFX"
        assert list(compiler.temp_dir.iterdir()) == []


@posix_only
def test_compile_returns_none_on_failure(shader_files, fake_shaderc, monkeypatch):
    source, varying = shader_files
    monkeypatch.setenv("FAKE_SHADERC_EXIT", "3")
    with BgfxShaderCompiler(fake_shaderc) as compiler:
        assert compiler.compile(_request(source, varying)) is None
        assert list(compiler.temp_dir.iterdir()) == []


@posix_only
def test_compile_returns_none_when_output_missing(shader_files, fake_shaderc, monkeypatch):
    source, varying = shader_files
    monkeypatch.setenv("FAKE_SHADERC_NO_OUTPUT", "1")
    with BgfxShaderCompiler(fake_shaderc) as compiler:
        assert compiler.compile(_request(source, varying)) is None


@posix_only
def test_compile_to_writes_output_and_passes_args(shader_files, fake_shaderc, tmp_path, monkeypatch):
    source, varying = shader_files
    args_file = tmp_path / "args.txt"
    monkeypatch.setenv("FAKE_SHADERC_ARGS", str(args_file))
    output = tmp_path / "out.bin"

    code = BgfxShaderCompiler(fake_shaderc).compile_to(_request(source, varying), output)

    assert code == 0
    assert output.read_bytes() == b"BGFX"
    args = args_file.read_text(encoding="utf-8").splitlines()
    assert args[:2] == ["-f", str(source.absolute())]
    assert "vs_5_0" in args


def test_temp_dir_is_created_lazily_and_removed_on_close(tmp_path):
    compiler = BgfxShaderCompiler("shaderc", temp_dir_prefix="materialbintool")
    assert compiler._temp_dir is None

    temp_dir = compiler.temp_dir
    assert temp_dir.is_dir()
    assert temp_dir.name.startswith("materialbintool")

    compiler.close()
    assert not temp_dir.exists()
    compiler.close()


def test_temp_output_names_are_unique():
    with BgfxShaderCompiler("shaderc") as compiler:
        names = {compiler._new_temp_output().name for _ in range(50)}
    assert len(names) == 50


@posix_only
def test_from_settings_uses_configured_compiler(fake_shaderc, monkeypatch):
    monkeypatch.setenv("SHADERC_BRIDGE_COMPILER_PATH", str(fake_shaderc))
    monkeypatch.setenv("SHADERC_BRIDGE_OPTIMIZATION_LEVEL", "2")

    compiler = BgfxShaderCompiler.from_settings(AppSettings())

    assert compiler.compiler_path == str(fake_shaderc.resolve())
    assert compiler.include_paths == []


def test_compile_returns_none_when_temp_dir_cannot_be_created(shader_files, monkeypatch):
    source, varying = shader_files

    def no_space(prefix):
        raise OSError(28, "No space left on device")

    def boom(*args, **kwargs):
        raise AssertionError("shaderc must not be launched")

    monkeypatch.setattr(bgfx_shaderc, "new_temp_dir", no_space)
    monkeypatch.setattr(subprocess, "run", boom)

    compiler = BgfxShaderCompiler("shaderc")
    assert compiler.compile(_request(source, varying)) is None
    assert compiler._temp_dir is None


def test_temp_dir_registers_and_unregisters_exit_hook(monkeypatch):
    registered = []
    unregistered = []
    monkeypatch.setattr(bgfx_shaderc.atexit, "register", registered.append)
    monkeypatch.setattr(bgfx_shaderc.atexit, "unregister", unregistered.append)

    compiler = BgfxShaderCompiler("shaderc")
    temp_dir = compiler.temp_dir
    _ = compiler.temp_dir
    assert registered == [compiler.close]

    compiler.close()
    compiler.close()
    assert unregistered == [compiler.close]
    assert not temp_dir.exists()


@posix_only
def test_compile_to_returns_minus_one_for_non_executable_compiler(shader_files, tmp_path):
    source, varying = shader_files
    not_executable = tmp_path / "shaderc"
    not_executable.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
    not_executable.chmod(0o644)

    compiler = BgfxShaderCompiler(not_executable)

    assert compiler.compile_to(_request(source, varying), tmp_path / "x.bin") == LAUNCH_FAILED
    assert not (tmp_path / "x.bin").exists()
