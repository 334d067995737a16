import io
import json
import socket
import threading
import urllib.error
from unittest.mock import patch

import pytest

from edgectl.cloud.client import CloudClient
from edgectl.commands import logs as logs_command
from edgectl.commands.logs import logs_action, normalize_services
from edgectl.errors import (
    DeviceAPIError,
    DeviceUnreachableError,
    EdgectlError,
    LogStreamClosedError,
    NotLoggedInError,
)
from edgectl.models import LogMessage


class FakeDeviceAPI:
    def __init__(self, address, messages=(), reachable=True):
        self.address = address
        self.messages = list(messages)
        self.reachable = reachable
        self.pinged = False
        self.streamed = False

    def ping(self):
        self.pinged = True
        if not self.reachable:
            raise DeviceAPIError("connection refused")
        return "OK"

    def get_log_stream(self):
        self.streamed = True
        return iter(self.messages)


class FakeSubscription:
    def __init__(self, lines=(), error=None):
        self.lines = list(lines)
        self.error = error
        self.listeners = {"line": [], "error": []}
        self.unsubscribed = False

    def on(self, event, callback):
        self.listeners[event].append(callback)
        return self

    def start(self):
        for line in self.lines:
            for callback in self.listeners["line"]:
                callback(line)
        if self.error is not None:
            for callback in self.listeners["error"]:
                callback(self.error)
        return self

    def unsubscribe(self):
        self.unsubscribed = True


class FakeLogs:
    def __init__(self, history=(), subscription=None):
        self._history = list(history)
        self.subscription = subscription
        self.history_calls = []
        self.subscribe_calls = []

    def history(self, uuid):
        self.history_calls.append(uuid)
        return list(self._history)

    def subscribe(self, uuid, count=100):
        self.subscribe_calls.append((uuid, count))
        return self.subscription


class FakeCloud:
    def __init__(self, logs=None, services=None, logged_in=True):
        self.logs = logs or FakeLogs()
        self.services = services or {}
        self.logged_in = logged_in
        self.service_names = {}
        self.service_lookups = []

    def is_logged_in(self):
        return self.logged_in

    def get_service(self, service_id):
        self.service_lookups.append(service_id)
        if service_id == 999:
            raise EdgectlError("lookup failed")
        name = self.services.get(service_id)
        return {"service_name": name} if name else None


class ExplodingCloud:
    """Fails if the cloud path is taken."""

    @property
    def logs(self):
        raise AssertionError("cloud API must not be used for local devices")

    def is_logged_in(self):
        raise AssertionError("cloud API must not be used for local devices")


def _messages(*texts):
    return [LogMessage(message=text, timestamp=1700000000000, service_name="main") for text in texts]


def _printed_messages(capsys):
    return [line.split("] ")[-1] for line in capsys.readouterr().out.splitlines()]


def test_normalize_services():
    assert normalize_services(None) is None
    assert normalize_services("main") == ["main"]
    assert normalize_services(["a", "b"]) == ["a", "b"]
    assert normalize_services([]) is None


@pytest.mark.parametrize("tail", [False, True])
@pytest.mark.parametrize("address", ["192.168.0.31", "23c73a1.local"])
def test_local_device_path_ignores_tail_flag(capsys, address, tail):
    created = []

    def factory(addr):
        api = FakeDeviceAPI(addr, _messages("one", "two"))
        created.append(api)
        return api

    logs_action(address, tail=tail, cloud=ExplodingCloud(), device_api_factory=factory)

    assert len(created) == 1
    assert created[0].address == address
    assert created[0].pinged and created[0].streamed
    assert _printed_messages(capsys) == ["one", "two"]


def test_local_device_unreachable():
    def factory(addr):
        return FakeDeviceAPI(addr, reachable=False)

    with pytest.raises(DeviceUnreachableError, match="Cannot access local mode device at address 10.0.0.5"):
        logs_action("10.0.0.5", device_api_factory=factory)


def test_local_device_filters(capsys):
    messages = [
        LogMessage(message="from main", service_name="main"),
        LogMessage(message="from db", service_name="db"),
        LogMessage(message="system", is_system=True),
    ]

    logs_action("10.0.0.5", service=["db"], system=True, device_api_factory=lambda a: FakeDeviceAPI(a, messages))

    assert _printed_messages(capsys) == ["from db", "system"]


def test_cloud_requires_login():
    cloud = FakeCloud(logged_in=False)
    with pytest.raises(NotLoggedInError):
        logs_action("23c73a1", cloud=cloud)
    assert cloud.logs.history_calls == []


def test_cloud_history_printed_once_in_order(capsys):
    history = [
        LogMessage(message="first", timestamp=1, service_id=1),
        LogMessage(message="second", timestamp=2, is_system=True),
        LogMessage(message="third", timestamp=3, service_id=1),
    ]
    cloud = FakeCloud(logs=FakeLogs(history=history), services={1: "main"})

    logs_action("23c73a1", cloud=cloud)

    assert cloud.logs.history_calls == ["23c73a1"]
    assert cloud.logs.subscribe_calls == []
    out = capsys.readouterr().out.splitlines()
    assert [line.split("] ")[-1] for line in out] == ["first", "second", "third"]
    assert "[main] first" in out[0]
    # Service names are cached for the rest of the command
    assert cloud.service_lookups == [1]


def test_cloud_unknown_service(capsys):
    history = [
        LogMessage(message="orphan", service_id=42),
        LogMessage(message="broken lookup", service_id=999),
    ]
    cloud = FakeCloud(logs=FakeLogs(history=history))

    logs_action("23c73a1", cloud=cloud)

    out = capsys.readouterr().out
    assert "[Unknown service] orphan" in out
    assert "[Unknown service] broken lookup" in out


@pytest.mark.parametrize(
    "lookup",
    [
        io.BytesIO(b"<html>502 Bad Gateway</html>"),
        socket.timeout("timed out"),
        urllib.error.HTTPError("https://api.example.com", 500, "Internal Server Error", {}, None),
    ],
)
def test_cloud_history_survives_failed_service_lookup(capsys, lookup):
    cloud = CloudClient("https://api.example.com", token="secret")
    responses = [
        io.BytesIO(json.dumps({"id": 1, "username": "me"}).encode("utf-8")),
        io.BytesIO(json.dumps([{"message": "hello", "serviceId": 7, "timestamp": 1}]).encode("utf-8")),
        lookup,
    ]
    with patch("edgectl.cloud.client.urllib.request.urlopen", side_effect=responses):
        logs_action("23c73a1", cloud=cloud)

    assert "[Unknown service] hello" in capsys.readouterr().out
    assert 7 not in cloud.service_names


def test_cloud_history_service_filter(capsys):
    history = [
        LogMessage(message="main line", service_id=1),
        LogMessage(message="db line", service_id=2),
        LogMessage(message="system line", is_system=True),
    ]
    cloud = FakeCloud(logs=FakeLogs(history=history), services={1: "main", 2: "db"})

    logs_action("23c73a1", service="main", cloud=cloud)

    assert _printed_messages(capsys) == ["main line"]


def test_cloud_tail_raises_stream_error(capsys):
    error = LogStreamClosedError("connection reset")
    subscription = FakeSubscription(lines=_messages("live one", "live two"), error=error)
    cloud = FakeCloud(logs=FakeLogs(subscription=subscription))

    with pytest.raises(LogStreamClosedError) as excinfo:
        logs_action("23c73a1", tail=True, cloud=cloud)

    assert excinfo.value is error
    assert cloud.logs.subscribe_calls == [("23c73a1", 100)]
    assert cloud.logs.history_calls == []
    assert subscription.unsubscribed
    assert _printed_messages(capsys) == ["live one", "live two"]


def test_cloud_tail_never_returns_without_error():
    subscription = FakeSubscription(lines=_messages("only line"))
    cloud = FakeCloud(logs=FakeLogs(subscription=subscription))
    finished = threading.Event()

    def run():
        try:
            logs_action("23c73a1", tail=True, cloud=cloud)
        finally:
            finished.set()

    worker = threading.Thread(target=run, daemon=True)
    worker.start()

    assert not finished.wait(timeout=0.5)
    assert worker.is_alive()


def test_default_device_api_uses_config(monkeypatch):
    from types import SimpleNamespace

    monkeypatch.setattr(
        "edgectl.config.load_config",
        lambda: SimpleNamespace(device_api_port=1234, request_timeout=7),
    )
    api = logs_command._default_device_api("10.0.0.5")
    assert api.base_url == "http://10.0.0.5:1234"
    assert api.timeout == 7
