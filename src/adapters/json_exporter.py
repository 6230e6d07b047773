"""Exportación JSON del reporte de compilación.

Por qué JSON:
- Interoperabilidad con scripts de build y CI.
- Permite persistir qué targets se generaron sin volver a invocar shaderc.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.models import CompileReport


def export_report_json(*, report: CompileReport, output_path: Path) -> Path:
    """Exporta `CompileReport` a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = report.model_dump(mode="json")
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
