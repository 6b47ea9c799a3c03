"""Lectura/escritura de packages en JSON.

Por qué JSON:
- Es el formato con el que el servidor acepta y devuelve packages.
- Permite versionar packages exportados y reaplicarlos después.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel


def export_model_json(*, model: BaseModel, output_path: Path) -> Path:
    """Exporta un modelo (p.ej. `Pkg`) a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = model.model_dump(mode="json", by_alias=True, exclude_none=True)
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path


def load_json_file(path: Path) -> Any:
    """Carga un fichero JSON UTF-8 (cuerpos de create/apply escritos a mano)."""

    return json.loads(path.read_text(encoding="utf-8"))
