from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict

from apklayer.apk.index import Package, read_installed
from apklayer.build.types import Architecture
from apklayer.errors import SBOMError

from .builder import build_cyclonedx_sbom, canonicalize_sbom
from .models import ImageInfo, Options, OSInfo
from .spdx import build_spdx_sbom

logger = logging.getLogger(__name__)

Renderer = Callable[[Options], Dict[str, Any]]

# format name -> (file extension, renderer)
RENDERERS: dict[str, tuple[str, Renderer]] = {
    "spdx": ("spdx.json", build_spdx_sbom),
    "cyclonedx": ("cdx.json", build_cyclonedx_sbom),
}

OS_RELEASE = Path("etc/os-release")


def _parse_os_release(text: str) -> dict[str, str]:
    values: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        values[key.strip()] = value.strip().strip('"').strip("'")
    return values


class SBOM:
    def __init__(self, options: Options | None = None, work_dir: Path | None = None):
        self.options = options or Options()
        self.work_dir = work_dir

    @classmethod
    def with_work_dir(cls, work_dir: Path | str, arch: Architecture) -> "SBOM":
        s = cls(Options(image_info=ImageInfo(arch=arch)), work_dir=Path(work_dir))
        s.read_release_data()
        return s

    def read_release_data(self) -> OSInfo:
        """Fill OS identity from the build root's os-release, when there is one."""
        if self.work_dir is None:
            return self.options.os
        path = self.work_dir / OS_RELEASE
        if not path.is_file():
            logger.debug("no %s in build root, leaving OS info unset", OS_RELEASE)
            return self.options.os
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise SBOMError(f"reading {OS_RELEASE} from build root: {e}") from e
        values = _parse_os_release(text)
        self.options.os = OSInfo(
            id=values.get("ID", "unknown"),
            name=values.get("NAME", ""),
            version=values.get("VERSION_ID", ""),
        )
        return self.options.os

    def read_package_index(self) -> list[Package]:
        if self.work_dir is None:
            raise SBOMError("no build root to read the package index from")
        return read_installed(self.work_dir)

    def _output_path(self, ext: str) -> Path:
        arch = self.options.image_info.arch
        suffix = f"-{arch.to_apk()}" if arch else ""
        return self.options.output_dir / f"{self.options.file_name}{suffix}.{ext}"

    def generate(self) -> list[Path]:
        """Write one document per requested format; either all are written or none."""
        unknown = [f for f in self.options.formats if f not in RENDERERS]
        if unknown:
            raise SBOMError(f"unsupported SBOM format(s): {', '.join(unknown)}")

        rendered: list[tuple[Path, str]] = []
        for fmt in self.options.formats:
            ext, render = RENDERERS[fmt]
            rendered.append((self._output_path(ext), canonicalize_sbom(render(self.options))))

        written: list[Path] = []
        try:
            self.options.output_dir.mkdir(parents=True, exist_ok=True)
            for path, text in rendered:
                path.write_text(text, encoding="utf-8")
                written.append(path)
                logger.info("wrote SBOM %s", path)
        except OSError as e:
            for path in written:
                try:
                    path.unlink()
                except OSError:
                    logger.exception("Failed to remove partial SBOM %s", path)
            raise SBOMError(f"writing SBOM documents to {self.options.output_dir}: {e}") from e
        return written
