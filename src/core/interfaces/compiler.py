"""Contrato de compiladores de shaders.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- Permite que el pipeline use shaderc real o un doble de test sin acoplar
  el Core a una implementación concreta.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from core.domain.models import CompileRequest


@runtime_checkable
class ShaderCompiler(Protocol):
    """Contrato mínimo para un compilador de shaders.

    Reglas de diseño:
    - Los fallos se reportan por valor de retorno (None / código != 0).
    - `compile_to` devuelve -1 si el proceso no se pudo lanzar.
    """

    def compile(self, request: CompileRequest) -> bytes | None:
        """Compila y devuelve el binario en memoria (None si falla)."""

        ...

    def compile_to(self, request: CompileRequest, output: Path) -> int:
        """Compila a `output` y devuelve el código de salida del proceso."""

        ...
