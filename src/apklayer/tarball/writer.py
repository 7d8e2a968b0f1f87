"""Deterministic gzip-compressed tar serialization of a directory tree.

Two trees with the same names, contents, modes and ownership serialize to the
same bytes for the same source date epoch:

  * entries are visited depth first in byte order of their names;
  * every entry carries the source date epoch as its mtime;
  * user/group names are blanked, numeric ids are kept;
  * the gzip header has no file name and a zero timestamp.
"""
from __future__ import annotations

import gzip
import logging
import os
import tarfile
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Iterator

from ..settings import settings

logger = logging.getLogger(__name__)


def _epoch_seconds(value: datetime | int | float) -> int:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp())
    return int(value)


def walk_tree(root: Path) -> Iterator[tuple[Path, str]]:
    """Yield ``(path, archive name)`` for everything below *root*, root excluded."""

    def _walk(directory: Path, prefix: str) -> Iterator[tuple[Path, str]]:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: os.fsencode(e.name))
        for entry in entries:
            arcname = f"{prefix}{entry.name}"
            path = Path(entry.path)
            yield path, arcname
            if entry.is_dir(follow_symlinks=False):
                yield from _walk(path, arcname + "/")

    yield from _walk(root, "")


class TarballWriter:
    def __init__(self, source_date_epoch: datetime | int = 0, compresslevel: int | None = None):
        self.source_date_epoch = _epoch_seconds(source_date_epoch)
        self.compresslevel = settings.apklayer_gzip_level if compresslevel is None else compresslevel

    def write_archive(self, out: BinaryIO, root: Path | str) -> int:
        """Serialize *root* into *out*; returns the number of entries written."""
        root = Path(root)
        count = 0
        with gzip.GzipFile(filename="", mode="wb", fileobj=out, compresslevel=self.compresslevel, mtime=0) as gz:
            with tarfile.open(fileobj=gz, mode="w", format=tarfile.PAX_FORMAT) as tw:
                for path, arcname in walk_tree(root):
                    info = tw.gettarinfo(name=str(path), arcname=arcname)
                    if info is None:
                        logger.debug("skipping unsupported file type %s", path)
                        continue
                    info.mtime = self.source_date_epoch
                    info.uname = ""
                    info.gname = ""
                    if info.isreg():
                        with path.open("rb") as f:
                            tw.addfile(info, f)
                    else:
                        tw.addfile(info)
                    count += 1
        return count
