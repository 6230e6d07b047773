"""Adaptador para bgfx `shaderc`.

Responsabilidad:
- Traducir un `CompileRequest` a la línea de comandos de shaderc.
- Lanzar shaderc como proceso hijo (stdout/stderr heredados) y esperar.
- Para compilaciones en memoria, gestionar un directorio temporal propio.

Los fallos se devuelven como valor: `None` en `compile`, código != 0 (o -1
si el proceso no arrancó) en `compile_to`.
"""

from __future__ import annotations

import atexit
import logging
import random
import shlex
import subprocess
import time
from pathlib import Path
from typing import Iterable

from adapters.file_utils import delete, new_temp_dir, read_all_bytes
from adapters.shaderc_locator import find_shaderc
from core.config import AppSettings
from core.domain.models import CompileRequest
from core.domain.profiles import (
    is_supported,
    to_platform_string,
    to_profile_string,
    to_type_string,
)

logger = logging.getLogger(__name__)

LAUNCH_FAILED = -1


class BgfxShaderCompiler:
    """Invoca shaderc para una petición de compilación cada vez."""

    def __init__(
        self,
        compiler_path: Path | str,
        *,
        optimization_level: int = 3,
        include_paths: Iterable[Path | str] = (),
        temp_dir_prefix: str = "materialbintool",
    ) -> None:
        self._compiler_path = str(compiler_path)
        self._optimization_level = optimization_level
        self._include_paths: list[str] = [str(p) for p in include_paths]
        self._temp_dir_prefix = temp_dir_prefix
        self._temp_dir: Path | None = None
        self._random = random.Random()

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings | None = None,
        *,
        compiler_path: Path | str | None = None,
    ) -> "BgfxShaderCompiler":
        """Crea el compilador desde `AppSettings` (localizando shaderc si hace falta)."""

        settings = settings or AppSettings()
        path = find_shaderc(compiler_path or settings.compiler_path)
        return cls(
            path,
            optimization_level=settings.optimization_level,
            include_paths=settings.include_paths,
            temp_dir_prefix=settings.temp_dir_prefix,
        )

    @property
    def compiler_path(self) -> str:
        return self._compiler_path

    @property
    def include_paths(self) -> list[str]:
        return list(self._include_paths)

    def add_include_path(self, include_path: Path | str) -> None:
        self._include_paths.append(str(include_path))

    # Temp dir -----------------------------------------------------------------

    @property
    def temp_dir(self) -> Path:
        """Directorio temporal de la instancia (se crea al primer uso)."""

        if self._temp_dir is None:
            self._temp_dir = new_temp_dir(self._temp_dir_prefix)
            atexit.register(self.close)
            logger.debug("Created temp dir %s", self._temp_dir)
        return self._temp_dir

    def close(self) -> None:
        if self._temp_dir is None:
            return
        temp_dir, self._temp_dir = self._temp_dir, None
        atexit.unregister(self.close)
        delete(temp_dir)
        logger.debug("Removed temp dir %s", temp_dir)

    def __enter__(self) -> "BgfxShaderCompiler":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _new_temp_output(self) -> Path:
        name = f"{time.time_ns()}{self._random.getrandbits(32):x}"
        return self.temp_dir / name

    # Compilación --------------------------------------------------------------

    def build_command(self, request: CompileRequest, output: Path | str) -> list[str]:
        """Línea de comandos completa de shaderc para `request`."""

        command = [
            self._compiler_path,
            "-f", str(Path(request.input).absolute()),
            "-o", str(output),
            "--varyingdef", str(Path(request.varying_def).absolute()),
            "--define", str(request.defines),
            "--platform", to_platform_string(request.platform),
            "--type", to_type_string(request.stage),
            "--profile", to_profile_string(request.platform, request.stage),
        ]
        for include_path in self._include_paths:
            command.extend(["-i", include_path])
        command.extend(["-O", str(self._optimization_level)])
        return command

    def compile(self, request: CompileRequest) -> bytes | None:
        """Compila en un fichero temporal y devuelve su contenido.

        Devuelve None si no se pudo crear el temporal, si shaderc falla o si no
        generó salida. El temporal se borra siempre.
        """

        try:
            temp_output = self._new_temp_output()
        except OSError:
            logger.exception("Could not create temp dir (%s*)", self._temp_dir_prefix)
            return None

        try:
            code = self.compile_to(request, temp_output)
            if code != 0:
                return None
            if not temp_output.exists():
                logger.warning(
                    "shaderc exited with 0 but produced no output for %s", request.input
                )
                return None
            return read_all_bytes(temp_output)
        finally:
            delete(temp_output)

    def compile_to(self, request: CompileRequest, output: Path | str) -> int:
        """Compila a `output` y devuelve el código de salida de shaderc."""

        for label, path in (("input", request.input), ("varying def", request.varying_def)):
            if not Path(path).is_file():
                logger.error("Missing %s file: %s", label, path)
                return LAUNCH_FAILED

        if not is_supported(request.platform):
            logger.warning(
                "Platform %s has no shaderc backend; passing an empty --platform",
                request.platform.value,
            )

        command = self.build_command(request, output)
        logger.debug("Running: %s", shlex.join(command))

        try:
            completed = subprocess.run(command, check=False)
        except OSError:
            logger.exception("Could not launch shaderc (%s)", self._compiler_path)
            return LAUNCH_FAILED

        if completed.returncode != 0:
            logger.info(
                "shaderc failed for %s (%s/%s): exit code %s",
                request.input,
                request.platform.value,
                request.stage.value,
                completed.returncode,
            )
        return completed.returncode
