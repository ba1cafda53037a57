from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import BinaryIO, Optional

from ..core.exceptions import StorageError
from .photo_storage import PhotoStorage

logger = logging.getLogger(__name__)


class LocalPhotoStorage(PhotoStorage):
    """Stores photos under ``root_dir`` and serves them from ``public_base_url``.

    Keys look like ``profile-pictures/42.png``; the same key is overwritten on re-upload.
    """

    def __init__(self, root_dir: str | Path, public_base_url: str):
        self._root = Path(root_dir)
        self._public_base_url = public_base_url.rstrip("/")

    @property
    def root_dir(self) -> Path:
        return self._root

    def _path_for(self, key: str) -> Path:
        path = (self._root / key).resolve()
        if self._root.resolve() not in path.parents:
            raise StorageError(f"Invalid storage key: {key!r}")
        return path

    def save(self, key: str, stream: BinaryIO) -> str:
        path = self._path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("wb") as out:
                shutil.copyfileobj(stream, out)
        except OSError as e:
            raise StorageError(f"Could not store photo: {e}") from e

        logger.info("Stored photo %s", key)
        return f"{self._public_base_url}/{key}"

    def delete_prefix(self, prefix: str, *, keep: Optional[str] = None) -> int:
        base = self._path_for(prefix)
        kept = self._path_for(keep) if keep else None
        removed = 0
        for candidate in base.parent.glob(f"{base.name}*"):
            if kept is not None and candidate.resolve() == kept:
                continue
            try:
                candidate.unlink()
                removed += 1
            except OSError:
                logger.warning("Could not remove stored photo %s", candidate, exc_info=True)
        return removed
