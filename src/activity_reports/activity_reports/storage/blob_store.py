from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import BinaryIO, Protocol

logger = logging.getLogger(__name__)


class BlobStore(Protocol):
    """Attachment bytes keyed by a relative path."""

    def save(self, path: str, stream: BinaryIO) -> int:
        """Write the stream to ``path`` and return the number of bytes stored."""

        raise NotImplementedError

    def open(self, path: str) -> BinaryIO:
        raise NotImplementedError

    def delete(self, path: str) -> bool:
        """Remove ``path``; ``False`` if it did not exist. May raise ``OSError``."""

        raise NotImplementedError


class LocalBlobStore(BlobStore):
    def __init__(self, root: str | Path):
        self._root = Path(root).resolve()

    def _resolve(self, path: str) -> Path:
        target = (self._root / path).resolve()
        if target != self._root and self._root not in target.parents:
            raise ValueError(f"Blob path escapes storage root: {path!r}")
        return target

    def save(self, path: str, stream: BinaryIO) -> int:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("wb") as fh:
            shutil.copyfileobj(stream, fh)
        return target.stat().st_size

    def open(self, path: str) -> BinaryIO:
        return self._resolve(path).open("rb")

    def delete(self, path: str) -> bool:
        target = self._resolve(path)
        if not target.exists():
            return False
        target.unlink()
        return True


def remove_blob_quietly(blobs: BlobStore | None, path: str) -> bool:
    """Best-effort removal: failures are logged, never raised."""
    if blobs is None or not path:
        return False
    try:
        return blobs.delete(path)
    except (OSError, ValueError):
        logger.warning("failed to delete blob %s", path, exc_info=True)
        return False
