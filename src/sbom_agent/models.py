from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from apklayer.apk.index import Package
from apklayer.build.types import Architecture


class ImageInfo(BaseModel):
    tag: str = ""
    name: str = ""  # fully qualified reference, only set with a tag
    arch: Architecture | None = None
    digest: str = ""


class OSInfo(BaseModel):
    id: str = "unknown"
    name: str = ""
    version: str = ""


class Options(BaseModel):
    image_info: ImageInfo = Field(default_factory=ImageInfo)
    os: OSInfo = Field(default_factory=OSInfo)
    output_dir: Path = Path(".")
    formats: list[str] = Field(default_factory=list)
    packages: list[Package] = Field(default_factory=list)
    file_name: str = "sbom"
    source_date_epoch: datetime = Field(default_factory=lambda: datetime.fromtimestamp(0, tz=timezone.utc))

    @field_validator("source_date_epoch")
    @classmethod
    def _epoch_in_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)
