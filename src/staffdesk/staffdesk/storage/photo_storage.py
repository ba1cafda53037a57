from __future__ import annotations

from typing import BinaryIO, Optional, Protocol


class PhotoStorage(Protocol):
    """Object storage for employee profile photos."""

    def save(self, key: str, stream: BinaryIO) -> str:
        """Store (overwrite) ``key`` and return its public URL."""

        raise NotImplementedError

    def delete_prefix(self, prefix: str, *, keep: Optional[str] = None) -> int:
        """Remove every object whose key starts with ``prefix`` (except ``keep``)."""

        raise NotImplementedError
