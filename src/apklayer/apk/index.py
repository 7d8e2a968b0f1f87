"""Reader for the apk package index text format.

Both ``APKINDEX`` (inside ``APKINDEX.tar.gz``) and the installed database
(``lib/apk/db/installed``) are blank-line separated records of ``K:value``
lines. Only the keys below are interpreted; installed-db file listings
(``F:``, ``R:``, ``Z:`` ...) are skipped.
"""
from __future__ import annotations

import tarfile
from pathlib import Path

from pydantic import BaseModel, Field

from ..errors import PackageIndexError

INSTALLED_DB = Path("lib/apk/db/installed")


class Package(BaseModel):
    name: str
    version: str = ""
    arch: str = ""
    description: str = ""
    license: str = ""
    origin: str = ""
    maintainer: str = ""
    url: str = ""
    checksum: str = ""
    size: int = 0
    installed_size: int = 0
    build_time: int = 0
    commit: str = ""
    dependencies: list[str] = Field(default_factory=list)
    provides: list[str] = Field(default_factory=list)

    def filename(self) -> str:
        return f"{self.name}-{self.version}.apk"


class APKIndex(BaseModel):
    description: str = ""
    packages: list[Package] = Field(default_factory=list)


_STR_KEYS = {
    "P": "name",
    "V": "version",
    "A": "arch",
    "T": "description",
    "L": "license",
    "o": "origin",
    "m": "maintainer",
    "U": "url",
    "C": "checksum",
    "c": "commit",
}
_INT_KEYS = {"S": "size", "I": "installed_size", "t": "build_time"}
_LIST_KEYS = {"D": "dependencies", "p": "provides"}


def _parse_record(lines: list[tuple[int, str]]) -> Package:
    fields: dict = {}
    for lineno, line in lines:
        key, sep, value = line.partition(":")
        if not sep or len(key) != 1:
            raise PackageIndexError(f"line {lineno}: malformed index line {line!r}")
        if key in _STR_KEYS:
            fields[_STR_KEYS[key]] = value
        elif key in _INT_KEYS:
            try:
                fields[_INT_KEYS[key]] = int(value)
            except ValueError as e:
                raise PackageIndexError(f"line {lineno}: {key}: expects an integer, got {value!r}") from e
        elif key in _LIST_KEYS:
            fields[_LIST_KEYS[key]] = value.split()
    if "name" not in fields:
        raise PackageIndexError(f"line {lines[0][0]}: package record without a name (P:)")
    return Package(**fields)


def parse_index(text: str, description: str = "") -> APKIndex:
    """Parse index text into packages, keeping the order of the records."""
    packages: list[Package] = []
    record: list[tuple[int, str]] = []
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.rstrip("\r")
        if not line.strip():
            if record:
                packages.append(_parse_record(record))
                record = []
            continue
        record.append((lineno, line))
    if record:
        packages.append(_parse_record(record))
    return APKIndex(description=description, packages=packages)


def read_index_archive(path: Path | str) -> APKIndex:
    """Read an ``APKINDEX.tar.gz`` (its ``APKINDEX`` and ``DESCRIPTION`` members)."""
    try:
        with tarfile.open(path, mode="r:*") as tf:
            members = {m.name: m for m in tf.getmembers() if m.isreg()}
            if "APKINDEX" not in members:
                raise PackageIndexError(f"{path}: no APKINDEX member")
            text = tf.extractfile(members["APKINDEX"]).read().decode("utf-8")
            description = ""
            if "DESCRIPTION" in members:
                description = tf.extractfile(members["DESCRIPTION"]).read().decode("utf-8").strip()
    except (OSError, tarfile.TarError, UnicodeDecodeError) as e:
        raise PackageIndexError(f"reading {path}: {e}") from e
    return parse_index(text, description=description)


def read_installed(work_dir: Path | str) -> list[Package]:
    db = Path(work_dir) / INSTALLED_DB
    try:
        text = db.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise PackageIndexError(f"reading installed packages from {db}: {e}") from e
    return parse_index(text).packages
