"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core al proceso externo de compilación.
- Facilita serializar el resultado de una compilación multi-target (JSON).

Nota:
- Estos modelos describen *qué* se compila, no *cómo* se invoca a shaderc.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class ShaderCodePlatform(str, Enum):
    """Plataformas de código de shader presentes en un material."""

    Direct3D_SM20_Level_9_1 = "Direct3D_SM20_Level_9_1"
    Direct3D_SM20_Level_9_2 = "Direct3D_SM20_Level_9_2"
    Direct3D_SM20_Level_9_3 = "Direct3D_SM20_Level_9_3"
    Direct3D_SM30 = "Direct3D_SM30"
    Direct3D_SM40 = "Direct3D_SM40"
    Direct3D_SM50 = "Direct3D_SM50"
    Direct3D_SM60 = "Direct3D_SM60"
    Direct3D_SM65 = "Direct3D_SM65"
    Direct3D_XB1 = "Direct3D_XB1"
    Direct3D_XBX = "Direct3D_XBX"
    GLSL_120 = "GLSL_120"
    GLSL_430 = "GLSL_430"
    ESSL_100 = "ESSL_100"
    ESSL_300 = "ESSL_300"
    ESSL_310 = "ESSL_310"
    Metal = "Metal"
    Vulkan = "Vulkan"
    Nvn = "Nvn"
    PSSL = "PSSL"

    @classmethod
    def parse(cls, value: str) -> "ShaderCodePlatform":
        """Resolve a platform name case-insensitively."""

        needle = value.strip().lower()
        for member in cls:
            if member.value.lower() == needle:
                return member
        raise ValueError(f"Unknown shader platform: {value!r}")


class ShaderStage(str, Enum):
    Vertex = "Vertex"
    Fragment = "Fragment"
    Compute = "Compute"
    Unknown = "Unknown"

    @classmethod
    def parse(cls, value: str) -> "ShaderStage":
        needle = value.strip().lower()
        for member in cls:
            if member.value.lower() == needle:
                return member
        raise ValueError(f"Unknown shader stage: {value!r}")


class Defines:
    """Colección ordenada de defines del preprocesador.

    Reglas:
    - Cada entrada es `NAME` o `NAME=VALUE`.
    - `str(defines)` une las entradas con `;` (formato de `shaderc --define`).
    - Volver a añadir un nombre existente reemplaza su valor sin moverlo.
    """

    SEPARATOR = ";"

    def __init__(self, entries: Iterable[str] | None = None) -> None:
        self._entries: dict[str, str | None] = {}
        for entry in entries or ():
            name, value = self._split(entry)
            self.add(name, value)

    @staticmethod
    def _split(entry: str) -> tuple[str, str | None]:
        name, sep, value = entry.strip().partition("=")
        return name.strip(), (value.strip() if sep else None)

    @classmethod
    def parse(cls, text: str | None) -> "Defines":
        """Construye `Defines` desde el formato `A;B=1;C`."""

        if not text:
            return cls()
        return cls(part for part in text.split(cls.SEPARATOR) if part.strip())

    def add(self, name: str, value: str | None = None) -> "Defines":
        name = name.strip()
        if not name:
            raise ValueError("Define name must not be empty")
        if self.SEPARATOR in name or (value is not None and self.SEPARATOR in value):
            raise ValueError(f"Define must not contain {self.SEPARATOR!r}: {name!r}")
        self._entries[name] = value
        return self

    def remove(self, name: str) -> bool:
        return self._entries.pop(name.strip(), _MISSING) is not _MISSING

    def get(self, name: str) -> str | None:
        return self._entries.get(name)

    def copy(self) -> "Defines":
        clone = Defines()
        clone._entries = dict(self._entries)
        return clone

    def names(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._entries

    def __iter__(self) -> Iterator[str]:
        for name, value in self._entries.items():
            yield name if value is None else f"{name}={value}"

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Defines):
            return NotImplemented
        return list(self) == list(other)

    def __str__(self) -> str:
        return self.SEPARATOR.join(self)

    def __repr__(self) -> str:
        return f"Defines({list(self)!r})"


_MISSING = object()


class CompileRequest(BaseModel):
    """Una petición de compilación: fuente + varying.def + defines + destino."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    input: Path = Field(
        ...,
        description="Fichero fuente del shader (.sc).",
    )
    varying_def: Path = Field(
        ...,
        description="Fichero varying.def.sc con las definiciones de varyings.",
    )
    defines: Defines = Field(
        default_factory=Defines,
        description="Defines del preprocesador, en orden.",
    )
    platform: ShaderCodePlatform = Field(
        ...,
        description="Plataforma de código destino.",
    )
    stage: ShaderStage = Field(
        default=ShaderStage.Fragment,
        description="Etapa del shader (vertex/fragment/compute).",
    )


class CompileOutcome(BaseModel):
    """Resultado de un target dentro de una compilación multi-target."""

    platform: ShaderCodePlatform
    stage: ShaderStage
    exit_code: int = Field(
        ...,
        description="Código de salida de shaderc (-1 si no se pudo lanzar).",
    )
    output: Path | None = Field(
        default=None,
        description="Fichero generado (solo si la compilación tuvo éxito).",
    )
    size: int = Field(
        default=0,
        ge=0,
        description="Tamaño en bytes del binario generado.",
    )
    skipped: bool = Field(
        default=False,
        description="True si el target se omitió (plataforma sin backend).",
    )


class CompileReport(BaseModel):
    """Agregado de una ejecución del pipeline.

    Por qué un agregado:
    - Centraliza el estado (outcomes + warnings) para exportación JSON y
      presentación en la CLI.
    """

    source: Path
    varying_def: Path
    defines: str = Field(
        default="",
        description="Defines tal y como se pasaron a `--define`.",
    )
    outcomes: list[CompileOutcome] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Momento de generación del reporte (UTC).",
    )

    @property
    def failed(self) -> list[CompileOutcome]:
        return [o for o in self.outcomes if not o.skipped and o.exit_code != 0]
