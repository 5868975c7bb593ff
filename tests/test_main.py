# pylint: disable=missing-module-docstring,missing-function-docstring,missing-class-docstring,protected-access,unused-argument,too-few-public-methods,no-member,use-implicit-booleaness-not-comparison,line-too-long,invalid-name,too-many-statements,too-many-instance-attributes,wrong-import-position,wrong-import-order,deprecated-module,too-many-locals,too-many-lines,attribute-defined-outside-init,unexpected-keyword-arg,duplicate-code
import asyncio
import logging

import pytest

import main as main_module
from errors import DecodeError


class DummyState:
    def get_status(self):
        return {
            "connected": True,
            "last_seen": "2025-01-01T00:00:00+00:00",
            "evp_agent": "v1.40.0",
            "instances": 1,
            "edge_apps": 0,
            "elogs": 2,
        }


class DummyCtrl:
    def __init__(self, results, stop_event):
        self.results = list(results)
        self.stop_event = stop_event
        self.state = DummyState()
        self.polls = []

    def poll(self, timeout):
        self.polls.append(timeout)
        result = self.results.pop(0)
        if not self.results:
            self.stop_event.set()
        if isinstance(result, Exception):
            raise result
        return result

    def get_stats(self):
        return {"messages": len(self.polls)}


def test_check_requirements(monkeypatch):
    monkeypatch.setattr(main_module, "MQTT_AVAILABLE", False)
    assert main_module.check_requirements() is False
    monkeypatch.setattr(main_module, "MQTT_AVAILABLE", True)
    assert main_module.check_requirements() is True


def test_log_status(caplog):
    ctrl = DummyCtrl([], asyncio.Event())
    with caplog.at_level(logging.INFO):
        main_module.log_status(ctrl)
    assert "connected=True" in caplog.text
    assert "agent=v1.40.0" in caplog.text


@pytest.mark.asyncio
async def test_run_monitor_survives_poll_errors(caplog):
    stop_event = asyncio.Event()
    ctrl = DummyCtrl(
        [DecodeError("bad document"), {"a/b": "x"}, {}],
        stop_event,
    )

    with caplog.at_level(logging.WARNING):
        await main_module.run_monitor(ctrl, stop_event, poll_timeout=0.05, status_interval=0)

    assert ctrl.polls == [0.05, 0.05, 0.05]
    assert "Poll error: bad document" in caplog.text


def test_run_monitor_logs_status(monkeypatch):
    calls = []
    monkeypatch.setattr(main_module, "log_status", calls.append)

    async def run():
        stop_event = asyncio.Event()
        ctrl = DummyCtrl([{}, {}], stop_event)
        await main_module.run_monitor(ctrl, stop_event, poll_timeout=0, status_interval=1e-9)
        return ctrl

    ctrl = asyncio.run(run())
    assert calls and calls[0] is ctrl


def test_main_without_paho(monkeypatch):
    monkeypatch.setattr(main_module, "MQTT_AVAILABLE", False)
    assert asyncio.run(main_module.main()) == 1


def test_main_connect_failure(monkeypatch):
    class DummySession:
        def connect(self):
            return False

    monkeypatch.setattr(main_module, "MQTT_AVAILABLE", True)
    monkeypatch.setattr(main_module, "MqttSession", DummySession)
    assert asyncio.run(main_module.main()) == 1


def test_main_runs_monitor_and_disconnects(monkeypatch):
    events = []

    class DummySession:
        def connect(self):
            events.append("connect")
            return True

        def disconnect(self):
            events.append("disconnect")

    async def fake_run_monitor(ctrl, stop_event):
        events.append(("run", type(ctrl).__name__))

    monkeypatch.setattr(main_module, "MQTT_AVAILABLE", True)
    monkeypatch.setattr(main_module, "MqttSession", DummySession)
    monkeypatch.setattr(main_module, "run_monitor", fake_run_monitor)
    monkeypatch.setattr(main_module, "log_status", lambda ctrl: events.append("status"))

    assert asyncio.run(main_module.main()) == 0
    assert events == ["connect", ("run", "MqttCtrl"), "disconnect", "status"]


def test_run_exits_with_main_code(monkeypatch):
    async def fake_main():
        return 3

    monkeypatch.setattr(main_module, "main", fake_main)
    with pytest.raises(SystemExit) as exc:
        main_module.run()
    assert exc.value.code == 3


def test_run_handles_keyboard_interrupt(monkeypatch):
    def interrupted(coro):
        coro.close()
        raise KeyboardInterrupt

    monkeypatch.setattr(main_module.asyncio, "run", interrupted)
    with pytest.raises(SystemExit) as exc:
        main_module.run()
    assert exc.value.code == 0
