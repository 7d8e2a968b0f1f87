from pathlib import Path

import pytest

INSTALLED = """\
C:Q1kq5dbzfqI0IsZtvnXjI8C2r0j1k=
P:alpine-baselayout
V:3.4.3-r1
A:x86_64
S:8870
I:331776
T:Alpine base dir structure and init scripts
U:https://git.alpinelinux.org/cgit/aports/tree/main/alpine-baselayout
L:GPL-2.0-only
o:alpine-baselayout
F:etc
R:hostname

C:Q1ZJk9c5NqO3s8xKO6G+YkWqhN5pI=
P:musl
V:1.2.4-r2
A:x86_64
S:407278
I:663552
T:the musl c library (libc) implementation
U:https://musl.libc.org/
L:MIT
o:musl
D:so:libc.musl-x86_64.so.1
p:so:libc.musl-x86_64.so.1=1

C:Q1Tb1zHvkJEoHzNpyc4k4jpLQHMZU=
P:busybox
V:1.36.1-r5
A:x86_64
T:Size optimized toolbox of many common UNIX utilities
L:GPL-2.0-only
o:busybox
D:so:libc.musl-x86_64.so.1
"""

OS_RELEASE = """\
NAME="Alpine Linux"
ID=alpine
VERSION_ID=3.18.4
PRETTY_NAME="Alpine Linux v3.18"
"""


@pytest.fixture
def build_root(tmp_path: Path) -> Path:
    root = tmp_path / "root"
    (root / "lib/apk/db").mkdir(parents=True)
    (root / "lib/apk/db/installed").write_text(INSTALLED)
    (root / "etc").mkdir()
    (root / "etc/os-release").write_text(OS_RELEASE)
    (root / "etc/hostname").write_text("layer\n")
    (root / "bin").mkdir()
    (root / "bin/busybox").write_bytes(b"\x7fELF fake busybox")
    (root / "bin/busybox").chmod(0o755)
    (root / "bin/sh").symlink_to("busybox")
    return root
