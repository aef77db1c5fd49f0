"""
File sink for crawled pages.

Pages are written to a temporary sibling first and renamed into place, so an
interrupted run never leaves a half-written ``page-NNN.html`` behind.
"""
from __future__ import annotations

from contextlib import suppress
from pathlib import Path
from typing import Union

from page_scout.errors import PersistError
from page_scout.logger import get_logger

log = get_logger("storage")


class FileStore:
    """Saves page content under a logical file name inside *output_dir*."""

    def __init__(self, output_dir: Union[str, Path]) -> None:
        self.output_dir = Path(output_dir)

    def path_for(self, name: str) -> Path:
        if not name or name in (".", "..") or Path(name).name != name:
            raise PersistError(name, "invalid file name")
        return self.output_dir / name

    def exists(self, name: str) -> bool:
        try:
            return self.path_for(name).is_file()
        except PersistError:
            return False

    def save(self, name: str, content: str) -> Path:
        """Write *content*, creating the output directory on first use. Raises :class:`PersistError`."""
        target = self.path_for(name)
        tmp = target.with_name(target.name + ".tmp")
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            tmp.write_text(content, encoding="utf-8")
            tmp.replace(target)
        except OSError as exc:
            with suppress(OSError):
                tmp.unlink(missing_ok=True)
            log.error("Error saving %s: %s", target, exc)
            raise PersistError(name, str(exc)) from exc
        log.debug("File saved: %s", target)
        return target


__all__ = ["FileStore"]
