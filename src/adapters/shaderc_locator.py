"""Localización del ejecutable shaderc de bgfx.

Orden:
1) Ruta explícita (flag `--compiler` o `SHADERC_BRIDGE_COMPILER_PATH`).
2) Nombres habituales en PATH (`shaderc`, `shadercRelease`, `shadercDebug`).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from shutil import which

logger = logging.getLogger(__name__)

SHADERC_NAMES: tuple[str, ...] = ("shaderc", "shadercRelease", "shadercDebug")


class ShadercNotFoundError(FileNotFoundError):
    """No hay un ejecutable shaderc utilizable."""


def find_shaderc(explicit: Path | str | None = None) -> Path:
    if explicit:
        candidate = Path(explicit).expanduser()
        if candidate.is_file():
            return candidate.resolve()
        # Permite pasar solo el nombre ("shadercRelease") y resolverlo en PATH.
        found = which(str(explicit))
        if found:
            return Path(found)
        raise ShadercNotFoundError(f"shaderc not found at '{candidate}'")

    for name in SHADERC_NAMES:
        found = which(name)
        if found:
            logger.debug("Found %s at %s", name, found)
            return Path(found)

    raise ShadercNotFoundError(
        "shaderc not found in PATH. Build bgfx tools (shaderc) and add them to PATH, "
        "or set SHADERC_BRIDGE_COMPILER_PATH."
    )


def is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)
