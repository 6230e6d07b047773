"""Helpers de ficheros para el adaptador de shaderc."""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


def read_all_bytes(path: Path) -> bytes:
    return Path(path).read_bytes()


def delete(path: Path) -> bool:
    """Borra un fichero o directorio (recursivo).

    Devuelve True si el path ya no existe al terminar. Un path inexistente no
    es un error.
    """

    path = Path(path)
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink(missing_ok=True)
    except OSError:
        logger.warning("Could not delete %s", path, exc_info=True)
        return False
    return True


def new_temp_dir(prefix: str) -> Path:
    return Path(tempfile.mkdtemp(prefix=prefix))
