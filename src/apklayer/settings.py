from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Reproducible builds convention; seconds since the epoch
    source_date_epoch: int = Field(default=0, validation_alias="SOURCE_DATE_EPOCH")
    apklayer_sbom_formats: list[str] = ["spdx"]
    apklayer_sbom_path: Path = Path(".")
    apklayer_use_proot: bool = False
    apklayer_gzip_level: int = 9  # changing this changes every layer digest
    apklayer_log_level: str = "INFO"

settings = Settings()
