# export.py — Hand rendered reports to something that can show/print them
#
# The workflows only know the ExportSurface interface. FileExportSurface
# drops the HTML into a reports directory for the browser or a PDF printer
# to pick up.

from __future__ import annotations

import re
import time
import unicodedata
from pathlib import Path

REPORTS_DIR = Path(__file__).resolve().parents[2] / "reports"


class ExportUnavailableError(RuntimeError):
    """The print/export target could not be acquired."""


def _slugify(title: str) -> str:
    ascii_title = unicodedata.normalize("NFKD", title).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "_", ascii_title.lower())
    slug = re.sub(r"_+", "_", slug).strip("_")
    return slug or "relatorio"


def _write_text_atomic(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as f:
        f.write(text)
    tmp_path.replace(path)


class ExportSurface:
    def open(self, document: str, name: str) -> str:
        """Deliver ``document``; return where it went. Raise ExportUnavailableError on failure."""
        raise NotImplementedError


class FileExportSurface(ExportSurface):
    def __init__(self, directory: Path | str | None = None) -> None:
        self.directory = Path(directory) if directory else REPORTS_DIR

    def open(self, document: str, name: str) -> str:
        stamp = time.strftime("%Y%m%d_%H%M%S")
        path = self.directory / f"{_slugify(name)}_{stamp}.html"
        try:
            _write_text_atomic(path, document)
        except OSError as exc:
            raise ExportUnavailableError(f"Não foi possível salvar o relatório em {self.directory}: {exc}") from exc
        return str(path)
