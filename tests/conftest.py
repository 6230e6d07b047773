import os
import stat
from pathlib import Path

import pytest

FAKE_SHADERC = """#!/bin/sh
# Stand-in for bgfx shaderc: records its argv and writes a tiny binary to -o.
if [ -n "$FAKE_SHADERC_ARGS" ]; then
  printf '%s\\n' "$@" > "$FAKE_SHADERC_ARGS"
fi
out=""
while [ $# -gt 0 ]; do
  case "$1" in
    -o) out="$2"; shift 2 ;;
    *) shift ;;
  esac
done
code="${FAKE_SHADERC_EXIT:-0}"
if [ "$code" = "0" ] && [ -z "$FAKE_SHADERC_NO_OUTPUT" ] && [ -n "$out" ]; then
  printf 'BGFX' > "$out"
fi
exit "$code"
"""


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    # Keep developer .env files and SHADERC_BRIDGE_* variables out of the tests.
    for key in list(os.environ):
        if key.startswith("SHADERC_BRIDGE_") or key.startswith("FAKE_SHADERC_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def shader_files(tmp_path: Path) -> tuple[Path, Path]:
    src = tmp_path / "shaders"
    src.mkdir()
    source = src / "fs_sky.sc"
    source.write_text("$input v_texcoord0\nvoid main() {}\n", encoding="utf-8")
    varying = src / "varying.def.sc"
    varying.write_text("vec2 v_texcoord0 : TEXCOORD0;\n", encoding="utf-8")
    return source, varying


@pytest.fixture()
def fake_shaderc(tmp_path: Path) -> Path:
    path = tmp_path / "bin" / "shaderc"
    path.parent.mkdir()
    path.write_text(FAKE_SHADERC, encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path
