import logging
import threading
import time

from taskscheduler.cluster import Heartbeater, LeaderElector, generate_node_id


class _FixedRng:
    def __init__(self, value):
        self.value = value

    def randrange(self, n):
        return self.value


def _messages(caplog):
    return [r.getMessage() for r in caplog.records]


def _assert_fallback_shape(node_id):
    assert len(node_id) == 11
    assert node_id[:5] == "node-"
    assert node_id[5:].isdigit() is True


def test_generate_node_id_shape():
    _assert_fallback_shape(generate_node_id())


def test_node_id_from_environment(monkeypatch):
    monkeypatch.setenv("NODE_ID", "node-a")
    assert LeaderElector(lambda: None).node_id == "node-a"


def test_node_id_fallback(monkeypatch):
    monkeypatch.delenv("NODE_ID", raising=False)
    _assert_fallback_shape(LeaderElector(lambda: None).node_id)


def test_explicit_node_id_wins(monkeypatch):
    monkeypatch.setenv("NODE_ID", "node-a")
    assert LeaderElector(lambda: None, node_id="node-b").node_id == "node-b"


def test_set_leadership_calls_back_on_gain_only():
    calls = []
    elector = LeaderElector(lambda: calls.append(1), node_id="n")
    assert elector.is_current_leader() is False
    elector.set_leadership(True)
    elector.set_leadership(True)
    assert calls == [1]
    assert elector.is_current_leader() is True
    elector.set_leadership(False)
    assert elector.is_current_leader() is False
    elector.set_leadership(True)
    assert len(calls) == 2


def test_elect_leader_uses_rng():
    elector = LeaderElector(lambda: None, node_id="n", rng=_FixedRng(1))
    elector.elect_leader()
    assert elector.is_current_leader() is True
    elector._rng = _FixedRng(0)
    elector.elect_leader()
    assert elector.is_current_leader() is False


def test_election_loop_gains_leadership():
    gained = threading.Event()
    elector = LeaderElector(gained.set, node_id="n", interval=0.01, rng=_FixedRng(1))
    elector.start()
    try:
        assert gained.wait(5)
    finally:
        elector.stop()
    assert elector.is_current_leader() is True


def test_heartbeater_logs_until_stopped(caplog):
    caplog.set_level(logging.INFO, logger="taskscheduler.cluster")
    hb = Heartbeater("n1", interval=0.01)
    hb.start()
    deadline = time.monotonic() + 5
    while "[Heartbeat] Node n1 is alive" not in _messages(caplog):
        assert time.monotonic() < deadline
        time.sleep(0.01)
    hb.stop()
    hb.stop()
    assert _messages(caplog).count("[Heartbeat] Node n1 stopped") == 1