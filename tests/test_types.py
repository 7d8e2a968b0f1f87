from apklayer.build.types import Architecture


def test_parse_aliases():
    assert Architecture.parse("x86_64") == Architecture.parse("amd64")
    assert Architecture.parse("aarch64").name == "arm64"
    assert Architecture.parse("linux/arm/v7").name == "arm/v7"
    assert str(Architecture.parse("armhf")) == "arm/v6"


def test_apk_and_qemu_names():
    arm64 = Architecture.parse("arm64")
    assert arm64.to_apk() == "aarch64"
    assert arm64.to_qemu() == "aarch64"
    assert Architecture.parse("amd64").to_apk() == "x86_64"
    assert Architecture.parse("386").to_qemu() == "i386"
    assert Architecture.parse("armv7").to_qemu() == "arm"


def test_compatibility():
    amd64 = Architecture.parse("amd64")
    arm64 = Architecture.parse("arm64")
    assert amd64.compatible(amd64)
    assert Architecture.parse("x86_64").compatible(amd64)
    assert Architecture.parse("386").compatible(amd64)
    assert not amd64.compatible(Architecture.parse("386"))
    assert not arm64.compatible(amd64)
    assert not amd64.compatible(arm64)
    assert Architecture.parse("arm/v7").compatible(arm64)


def test_host(monkeypatch):
    import platform
    monkeypatch.setattr(platform, "machine", lambda: "aarch64")
    assert Architecture.host().name == "arm64"
