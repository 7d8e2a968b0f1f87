import logging
import shutil

import pytest

from apklayer.errors import EnvironmentSetupError, ExecutionError
from apklayer.exec import executor as executor_mod
from apklayer.exec.executor import ExecutionMode, ExecutionStrategy, Executor


@pytest.fixture
def fake_which(monkeypatch):
    available = {"proot": "/usr/bin/proot", "qemu-aarch64": "/usr/bin/qemu-aarch64"}
    monkeypatch.setattr(shutil, "which", lambda name: available.get(name))
    return available


def test_native_command_line(tmp_path):
    ex = Executor(tmp_path)
    assert ex.strategy.mode is ExecutionMode.NATIVE
    assert ex.command_line("/bin/sh", "-c", "true") == ["chroot", str(tmp_path), "/bin/sh", "-c", "true"]


def test_proot_command_line(tmp_path, fake_which):
    ex = Executor(tmp_path, strategy=ExecutionStrategy.proot())
    cmd = ex.command_line("apk", "info")
    assert cmd[0] == "/usr/bin/proot"
    assert "-q" not in cmd
    assert cmd[-2:] == ["apk", "info"]


def test_proot_qemu_command_line(tmp_path, fake_which):
    ex = Executor(tmp_path, strategy=ExecutionStrategy.proot_qemu("aarch64"))
    cmd = ex.command_line("apk", "info")
    assert cmd[cmd.index("-q") + 1] == "/usr/bin/qemu-aarch64"
    assert cmd[cmd.index("-r") + 1] == str(tmp_path)


def test_missing_emulator(tmp_path, fake_which):
    with pytest.raises(EnvironmentSetupError, match="qemu-riscv64"):
        Executor(tmp_path, strategy=ExecutionStrategy.proot_qemu("riscv64"))


def test_missing_proot(tmp_path, monkeypatch):
    monkeypatch.setattr(shutil, "which", lambda name: None)
    with pytest.raises(EnvironmentSetupError, match="proot"):
        Executor(tmp_path, strategy=ExecutionStrategy.proot())


def test_invalid_work_dir(tmp_path):
    with pytest.raises(EnvironmentSetupError):
        Executor(tmp_path / "missing")


def test_qemu_strategy_needs_target():
    with pytest.raises(ValueError):
        ExecutionStrategy.proot_qemu("")


def test_execute_reports_failure(tmp_path, monkeypatch, caplog):
    class Proc:
        returncode = 3
        stdout = "partial\n"
        stderr = "boom\n"

    calls = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return Proc()

    monkeypatch.setattr(executor_mod.subprocess, "run", fake_run)
    ex = Executor(tmp_path, logging.getLogger("test.exec"))
    with caplog.at_level(logging.DEBUG, logger="test.exec"):
        with pytest.raises(ExecutionError) as info:
            ex.execute("/sbin/ldconfig")
    assert info.value.returncode == 3
    assert calls == [["chroot", str(tmp_path), "/sbin/ldconfig"]]
    assert "boom" in caplog.text


def test_execute_returns_stdout(tmp_path, monkeypatch):
    class Proc:
        returncode = 0
        stdout = "ok\n"
        stderr = ""

    monkeypatch.setattr(executor_mod.subprocess, "run", lambda cmd, **kw: Proc())
    assert Executor(tmp_path).execute("true") == "ok\n"
