import os
import stat
import sys
import time

import pytest

from frpc_gui.exceptions import ProcessLaunchError
from frpc_gui.process import ProcessManager, find_binary_path
from frpc_gui.settings import BINARY_NAME
from frpc_gui.service import FrpcService
from frpc_gui.models import AppStatus

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses a shell script as fake frpc")


def fake_frpc(tmp_path, body):
    path = tmp_path / "frpc"
    path.write_text("#!/bin/sh\n" + body + "\n", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def wait_for(predicate, timeout=5.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return False


@posix_only
def test_output_is_published_with_levels(tmp_path):
    binary = fake_frpc(tmp_path, "\n".join([
        "sleep 0.3",
        'echo "[I] try to connect to server..."',
        'printf "\\033[1;33m[W]\\033[0m careful\\n"',
        'echo "boom" 1>&2',
        "exit 3",
    ]))
    pm = ProcessManager(binary, config_path=tmp_path / "conf" / "frpc.ini")
    events = []
    pm.subscribe(events.append)

    run_id = pm.start("[common]\nserver_addr=127.0.0.1\n")
    proc = pm.process

    assert wait_for(lambda: any(e.msg.startswith("frpc exited") for e in events))
    assert wait_for(lambda: any(e.msg == "boom" for e in events))
    by_msg = {e.msg: e for e in events}
    assert by_msg["[I] try to connect to server..."].level == "info"
    assert by_msg["[W] careful"].level == "warning"
    assert by_msg["boom"].level == "error"
    assert by_msg["frpc exited with code 3"].level == "error"
    assert {e.run_id for e in events} == {run_id}
    assert not pm.running
    assert wait_for(lambda: proc.stdout.closed and proc.stderr.closed)


@posix_only
def test_config_is_written_and_passed(tmp_path):
    binary = fake_frpc(tmp_path, 'echo "args: $1 $2"\ncat "$2"')
    config_path = tmp_path / "frpc.ini"
    pm = ProcessManager(binary, config_path=config_path)
    events = []
    pm.subscribe(events.append)

    pm.start("[common]\nserver_port=7000\n")

    assert config_path.read_text(encoding="utf-8") == "[common]\nserver_port=7000\n"
    assert wait_for(lambda: any(e.msg == "server_port=7000" for e in events))
    assert any(e.msg == f"args: -c {config_path}" for e in events)


@posix_only
def test_stop_terminates_and_suppresses_exit_line(tmp_path):
    binary = fake_frpc(tmp_path, 'echo "[I] login to server success"\nwhile true; do sleep 0.1; done')
    pm = ProcessManager(binary, config_path=tmp_path / "frpc.ini")
    events = []
    pm.subscribe(events.append)

    pm.start("")
    assert wait_for(lambda: events)
    assert pm.running
    with pytest.raises(ProcessLaunchError):
        pm.start("")

    pm.stop()
    assert not pm.running
    time.sleep(0.2)
    assert not any(e.msg.startswith("frpc exited") for e in events)
    # stopping twice is harmless
    pm.stop()


@posix_only
def test_service_against_fake_frpc(tmp_path):
    binary = fake_frpc(tmp_path, "\n".join([
        'echo "[I] try to connect to server..."',
        'echo "[I] login to server success, get run id [abc]"',
        "while true; do sleep 0.1; done",
    ]))
    pm = ProcessManager(binary, config_path=tmp_path / "frpc.ini")
    service = FrpcService(pm)
    try:
        assert service.start("127.0.0.1", "7000", "", []) == []
        assert wait_for(lambda: service.status == AppStatus.RUNNING)
    finally:
        service.close()
    assert not pm.running


def test_missing_binary_raises(tmp_path):
    config_path = tmp_path / "frpc.ini"
    pm = ProcessManager(tmp_path / "does-not-exist", config_path=config_path)
    with pytest.raises(ProcessLaunchError):
        pm.start("[common]\n")
    assert config_path.exists()
    assert not pm.running


def test_subscription_detaches_on_exit(tmp_path):
    pm = ProcessManager(tmp_path / "frpc")
    events = []
    with pm.subscribe(events.append):
        pass
    assert pm._subscribers == []


def test_find_binary_prefers_env(tmp_path, monkeypatch):
    target = tmp_path / "custom-frpc"
    monkeypatch.setenv("FRPC_BIN", os.fspath(target))
    assert find_binary_path() == target


def test_find_binary_in_cwd_bin(tmp_path, monkeypatch):
    monkeypatch.delenv("FRPC_BIN", raising=False)
    monkeypatch.chdir(tmp_path)
    local = tmp_path / "bin" / BINARY_NAME
    local.parent.mkdir()
    local.write_text("", encoding="utf-8")
    found = find_binary_path()
    # a source checkout bin/ may win, otherwise the cwd copy is used
    assert found.name == BINARY_NAME
    assert found.is_file()
