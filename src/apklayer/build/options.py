from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..settings import settings
from .types import Architecture


def _default_logger() -> logging.Logger:
    return logging.getLogger("apklayer.build")


class BuildOptions(BaseModel):
    """Per-invocation build configuration shared by the three build stages.

    ``tarball_path`` is the only field a stage writes: ``build_tarball`` stores
    the resolved archive location there. An empty value asks for a fresh
    temporary file.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True)

    work_dir: Path
    arch: Architecture
    tarball_path: str = ""
    use_proot: bool = False
    source_date_epoch: datetime = Field(default_factory=lambda: datetime.fromtimestamp(0, tz=timezone.utc))
    tags: list[str] = Field(default_factory=list)
    sbom_formats: list[str] = Field(default_factory=list)
    sbom_path: Path = Path(".")
    log: logging.Logger = Field(default_factory=_default_logger, exclude=True)

    @field_validator("source_date_epoch")
    @classmethod
    def _epoch_in_utc(cls, v: datetime) -> datetime:
        # Naive values are UTC, never host-local time
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @classmethod
    def from_settings(cls, work_dir: Path, arch: Architecture | str, **overrides) -> "BuildOptions":
        if isinstance(arch, str):
            arch = Architecture.parse(arch)
        values = {
            "use_proot": settings.apklayer_use_proot,
            "source_date_epoch": datetime.fromtimestamp(settings.source_date_epoch, tz=timezone.utc),
            "sbom_formats": list(settings.apklayer_sbom_formats),
            "sbom_path": settings.apklayer_sbom_path,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(work_dir=work_dir, arch=arch, **values)
