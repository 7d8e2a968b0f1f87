from __future__ import annotations

import logging
from pathlib import Path


class InitContext:
    """s6 supervision layout of a build root."""

    def __init__(self, work_dir: Path | str, log: logging.Logger | None = None):
        self.work_dir = Path(work_dir)
        self.log = log or logging.getLogger(__name__)

    @property
    def service_dir(self) -> Path:
        return self.work_dir / "sv"

    def write_supervision_tree(self, services: dict[str, str]) -> Path:
        """Write one ``sv/<name>/run`` execline script per service."""
        self.log.info("building supervision tree")
        self.service_dir.mkdir(parents=True, exist_ok=True)
        for name in sorted(services):
            svc = self.service_dir / name
            svc.mkdir(parents=True, exist_ok=True)
            run = svc / "run"
            run.write_text(f"#!/bin/execlineb -P\n{services[name]}\n")
            run.chmod(0o755)
            self.log.debug("wrote %s", run)
        return self.service_dir
