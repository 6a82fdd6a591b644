from __future__ import annotations

import sys
from pathlib import Path

from akin.core.errors import TemplateLoadError


def load_template(path: str) -> str:
    """Read template text from a file, or from stdin when path is '-'.

    Does not parse; the engine owns syntax checking.
    """
    if path == "-":
        return sys.stdin.read()

    p = Path(path)
    if not p.exists():
        raise TemplateLoadError(
            code="E_FILE_NOT_FOUND",
            message="file does not exist",
            file=str(p),
        )
    if p.is_dir():
        raise TemplateLoadError(
            code="E_FILE_READ",
            message="path is a directory",
            file=str(p),
        )

    try:
        return p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise TemplateLoadError(code="E_FILE_READ", message=str(e), file=str(p)) from e


def write_output(path: str, text: str) -> None:
    p = Path(path)
    if str(p.parent) not in (".", ""):
        p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text + "\n", encoding="utf-8")
