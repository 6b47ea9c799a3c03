"""Script de ejecución sin instalar el paquete.

Uso: `python src/main.py stacks list --org <org>`. Con `pip install -e .`
el mismo punto de entrada queda disponible como `pkgstack`.
"""

from __future__ import annotations

import sys

# Workaround for UnicodeEncodeError on Windows terminals/CI (cp1252 vs utf-8).
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8")
    sys.stderr.reconfigure(encoding="utf-8")

from cli.main import run

if __name__ == "__main__":
    run()
