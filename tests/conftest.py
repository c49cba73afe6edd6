import pytest

from frpc_gui.models import ProxyItem
from frpc_gui.process import LogEvent, Subscription


class FakeProcess:
    """Stands in for ProcessManager; records calls and lets tests emit lines."""

    def __init__(self, fail_start=None, fail_stop=None):
        self.fail_start = fail_start
        self.fail_stop = fail_stop
        self.started = []
        self.stop_calls = 0
        self.run_id = 0
        self.subscribers = []

    def subscribe(self, callback):
        sub = Subscription(self, callback)
        self.subscribers.append(sub)
        return sub

    def _unsubscribe(self, sub):
        self.subscribers.remove(sub)

    def start(self, config_text):
        if self.fail_start:
            raise self.fail_start
        self.started.append(config_text)
        self.run_id += 1
        return self.run_id

    def stop(self):
        self.stop_calls += 1
        if self.fail_stop:
            raise self.fail_stop

    def emit(self, msg, level="info", run_id=None):
        for sub in list(self.subscribers):
            sub.callback(LogEvent(msg, level, self.run_id if run_id is None else run_id))


@pytest.fixture
def fake_process():
    return FakeProcess()


@pytest.fixture
def tcp_proxy():
    return ProxyItem(id="a1", name="ssh", type="tcp", local_ip="127.0.0.1",
                     local_port="22", remote_port="6000")


@pytest.fixture
def http_proxy():
    return ProxyItem(id="b2", name="web", type="http", local_ip="127.0.0.1",
                     local_port="8080", custom_domains="example.com")
