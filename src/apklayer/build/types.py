from __future__ import annotations

import platform

from pydantic import BaseModel, ConfigDict

# Any common spelling -> OCI platform name
_ALIASES: dict[str, str] = {
    "amd64": "amd64",
    "x86_64": "amd64",
    "386": "386",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "arm64": "arm64",
    "aarch64": "arm64",
    "arm/v8": "arm64",
    "arm/v7": "arm/v7",
    "armv7": "arm/v7",
    "armv7l": "arm/v7",
    "arm/v6": "arm/v6",
    "armv6": "arm/v6",
    "armv6l": "arm/v6",
    "armhf": "arm/v6",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
    "riscv64": "riscv64",
}

_TO_APK: dict[str, str] = {
    "amd64": "x86_64",
    "386": "x86",
    "arm64": "aarch64",
    "arm/v7": "armv7",
    "arm/v6": "armhf",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
    "riscv64": "riscv64",
}

_TO_QEMU: dict[str, str] = {
    "amd64": "x86_64",
    "386": "i386",
    "arm64": "aarch64",
    "arm/v7": "arm",
    "arm/v6": "arm",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
    "riscv64": "riscv64",
}

# target -> host architectures able to run its binaries without emulation
_RUNS_ON: dict[str, frozenset[str]] = {
    "386": frozenset({"amd64"}),
    "arm/v7": frozenset({"arm64"}),
    "arm/v6": frozenset({"arm64", "arm/v7"}),
}


class Architecture(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str

    @classmethod
    def parse(cls, value: str) -> "Architecture":
        key = value.strip().lower()
        if key.startswith("linux/"):
            key = key[len("linux/"):]
        # Unknown names are kept verbatim so new platforms still round-trip.
        return cls(name=_ALIASES.get(key, key))

    @classmethod
    def host(cls) -> "Architecture":
        return cls.parse(platform.machine())

    def to_apk(self) -> str:
        return _TO_APK.get(self.name, self.name)

    def to_qemu(self) -> str:
        return _TO_QEMU.get(self.name, self.name)

    def compatible(self, host: "Architecture") -> bool:
        """Whether binaries built for this architecture run natively on *host*."""
        if self.name == host.name:
            return True
        return host.name in _RUNS_ON.get(self.name, frozenset())

    def __str__(self) -> str:
        return self.name
