"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que el adaptador de shaderc lea config de forma consistente.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

logger = logging.getLogger(__name__)

APP_NAME = "shaderc-bridge"
ENV_PREFIX = "SHADERC_BRIDGE_"


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario.

    Windows usa %APPDATA%, macOS `Application Support` y el resto XDG.
    """

    if sys.platform.startswith("win"):
        return Path(os.environ.get("APPDATA") or Path.home()) / APP_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME
    return Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config") / APP_NAME


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _read_env_file(path: Path) -> dict[str, str]:
    """Lee `KEY=VALUE` de un .env (ignora comentarios y líneas sin `=`)."""

    entries: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        key, sep, value = line.strip().partition("=")
        if not sep or not key.strip() or key.lstrip().startswith("#"):
            continue
        entries[key.strip()] = value.strip().strip("\"'")
    return entries


def write_user_env_vars(values: dict[str, str | None]) -> Path:
    """Fusiona `values` en el .env del usuario; los valores None se ignoran."""

    env_path = get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    merged: dict[str, str] = {}
    if env_path.is_file():
        try:
            merged = _read_env_file(env_path)
        except OSError:
            logger.warning("Could not read %s, rewriting it from scratch", env_path)

    merged.update((key, value) for key, value in values.items() if value is not None)

    body = "".join(f"{key}={merged[key]}\n" for key in sorted(merged))
    env_path.write_text(f"# {APP_NAME} user config (.env)\n{body}", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    compiler_path: Path | None = Field(
        default=None,
        description="Ruta al ejecutable shaderc (si no, se busca en PATH).",
    )
    include_paths: Annotated[list[Path], NoDecode] = Field(
        default_factory=list,
        description="Directorios de include (-i) para todas las compilaciones.",
    )
    optimization_level: int = Field(
        default=3,
        ge=0,
        le=3,
        description="Nivel de optimización pasado como -O.",
    )
    temp_dir_prefix: str = Field(
        default="materialbintool",
        min_length=1,
        description="Prefijo del directorio temporal para salidas en memoria.",
    )
    log_level: str = Field(
        default="WARNING",
        description="Nivel de logging por defecto (DEBUG/INFO/WARNING/ERROR).",
    )

    @field_validator("include_paths", mode="before")
    @classmethod
    def _split_include_paths(cls, value: object) -> object:
        # En .env se acepta una lista JSON o rutas separadas por os.pathsep.
        if isinstance(value, str):
            if value.lstrip().startswith("["):
                return json.loads(value)
            return [part.strip() for part in value.split(os.pathsep) if part.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value!r}")
        return level
