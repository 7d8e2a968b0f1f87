from __future__ import annotations

import enum
import logging
import shutil
import subprocess
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from ..errors import EnvironmentSetupError, ExecutionError


class ExecutionMode(str, enum.Enum):
    NATIVE = "native"
    PROOT = "proot"
    PROOT_QEMU = "proot+qemu"


class ExecutionStrategy(BaseModel):
    """How commands reach the build root, decided once at setup time."""

    model_config = ConfigDict(frozen=True)

    mode: ExecutionMode = ExecutionMode.NATIVE
    qemu_arch: str | None = None

    @classmethod
    def native(cls) -> "ExecutionStrategy":
        return cls(mode=ExecutionMode.NATIVE)

    @classmethod
    def proot(cls) -> "ExecutionStrategy":
        return cls(mode=ExecutionMode.PROOT)

    @classmethod
    def proot_qemu(cls, qemu_arch: str) -> "ExecutionStrategy":
        if not qemu_arch:
            raise ValueError("proot+qemu strategy needs an emulation target")
        return cls(mode=ExecutionMode.PROOT_QEMU, qemu_arch=qemu_arch)

    @property
    def uses_qemu(self) -> bool:
        return self.mode is ExecutionMode.PROOT_QEMU


class Executor:
    """Runs commands inside a prepared build root."""

    def __init__(self, work_dir: Path | str, log: logging.Logger | None = None,
                 strategy: ExecutionStrategy | None = None):
        self.work_dir = Path(work_dir)
        self.log = log or logging.getLogger(__name__)
        self.strategy = strategy or ExecutionStrategy.native()

        if not self.work_dir.is_dir():
            raise EnvironmentSetupError(f"build root {self.work_dir} is not a directory")

        self.proot_path: str | None = None
        self.qemu_path: str | None = None
        if self.strategy.mode is not ExecutionMode.NATIVE:
            self.proot_path = shutil.which("proot")
            if self.proot_path is None:
                raise EnvironmentSetupError("proot requested but not found in PATH")
        if self.strategy.uses_qemu:
            emulator = f"qemu-{self.strategy.qemu_arch}"
            self.qemu_path = shutil.which(emulator)
            if self.qemu_path is None:
                raise EnvironmentSetupError(f"{emulator} is required but not found in PATH")

    def command_line(self, name: str, *args: str) -> list[str]:
        root = str(self.work_dir)
        if self.strategy.mode is ExecutionMode.NATIVE:
            return ["chroot", root, name, *args]
        cmd = [self.proot_path or "proot", "-b", "/dev", "-b", "/proc", "-b", "/sys", "-r", root, "-0", "-w", "/"]
        if self.strategy.uses_qemu:
            cmd += ["-q", self.qemu_path or f"qemu-{self.strategy.qemu_arch}"]
        return cmd + [name, *args]

    def execute(self, name: str, *args: str) -> str:
        cmd = self.command_line(name, *args)
        self.log.debug("running %s (%s)", " ".join(cmd), self.strategy.mode.value)
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, check=False)  # noqa: S603 no shell
        except OSError as e:
            raise ExecutionError(f"failed to start {name}: {e}") from e
        for line in proc.stdout.splitlines():
            self.log.debug("%s: %s", name, line)
        for line in proc.stderr.splitlines():
            self.log.debug("%s (stderr): %s", name, line)
        if proc.returncode != 0:
            raise ExecutionError(f"{name} exited with status {proc.returncode}", returncode=proc.returncode)
        return proc.stdout
