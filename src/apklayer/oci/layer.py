from __future__ import annotations

import gzip
import hashlib
from pathlib import Path

from ..errors import LayerFormatError

GZIP_MAGIC = b"\x1f\x8b"
_CHUNK = 65536


def _sha256_file(path: Path, opener=open) -> str:
    h = hashlib.sha256()
    with opener(path, "rb") as f:
        while True:
            chunk = f.read(_CHUNK)
            if not chunk:
                break
            h.update(chunk)
    return f"sha256:{h.hexdigest()}"


class Layer:
    """A compressed tar layer on disk, addressed by the sha256 of its bytes."""

    def __init__(self, path: Path):
        self.path = path
        self._digest: str | None = None
        self._diff_id: str | None = None

    def digest(self) -> str:
        if self._digest is None:
            self._digest = _sha256_file(self.path)
        return self._digest

    def diff_id(self) -> str:
        """Digest of the uncompressed tar stream."""
        if self._diff_id is None:
            try:
                self._diff_id = _sha256_file(self.path, opener=gzip.open)
            except (gzip.BadGzipFile, EOFError) as e:
                raise LayerFormatError(f"{self.path} is not a valid gzip stream: {e}") from e
        return self._diff_id

    def size(self) -> int:
        return self.path.stat().st_size


def layer_from_file(path: Path | str) -> Layer:
    path = Path(path)
    try:
        with path.open("rb") as f:
            magic = f.read(len(GZIP_MAGIC))
    except OSError as e:
        raise LayerFormatError(f"cannot read layer {path}: {e}") from e
    if magic != GZIP_MAGIC:
        raise LayerFormatError(f"{path} is not a gzip compressed tarball")
    return Layer(path)
