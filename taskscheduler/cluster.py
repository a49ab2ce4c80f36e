"""Node liveness heartbeats and a simulated leader election."""

from __future__ import annotations

import logging
import os
import random
import threading
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)


def generate_node_id() -> str:
    """Return a fallback node id built from the current time of day."""
    return "node-" + time.strftime("%H%M%S")


class Heartbeater:
    """Logs a liveness signal every ``interval`` seconds until stopped."""

    def __init__(self, node_id: str, interval: float = 5.0):
        self.node_id = node_id
        self.interval = interval
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("heartbeater already started")
        self._thread = threading.Thread(
            target=self._run, name=f"heartbeat-{self.node_id}", daemon=True
        )
        self._thread.start()

    def _run(self) -> None:
        while not self._stopped.wait(self.interval):
            logger.info("[Heartbeat] Node %s is alive", self.node_id)
        logger.info("[Heartbeat] Node %s stopped", self.node_id)

    def stop(self) -> None:
        """Stop the heartbeat loop; safe to call more than once."""
        self._stopped.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()


class LeaderElector:
    """Periodically decides whether this node leads, calling back on gaining leadership."""

    def __init__(
        self,
        on_leadership_gained: Callable[[], None],
        node_id: str | None = None,
        interval: float = 3.0,
        rng: random.Random | None = None,
    ):
        self.node_id = node_id or os.environ.get("NODE_ID") or generate_node_id()
        self.interval = interval
        self._callback = on_leadership_gained
        self._rng = rng if rng is not None else random.Random()
        self._is_leader = False
        self._lock = threading.Lock()
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("leader election already started")
        self._thread = threading.Thread(
            target=self._run, name=f"election-{self.node_id}", daemon=True
        )
        self._thread.start()
        logger.info("[Cluster] Node %s starting leader election loop", self.node_id)

    def _run(self) -> None:
        while not self._stopped.wait(self.interval):
            self.elect_leader()

    def stop(self) -> None:
        """Stop the election loop."""
        self._stopped.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def elect_leader(self) -> None:
        """Run one simulated election: leadership with a one-in-three chance."""
        self.set_leadership(self._rng.randrange(3) == 1)

    def set_leadership(self, is_leader: bool) -> None:
        with self._lock:
            if self._is_leader == is_leader:
                return
            self._is_leader = is_leader
        if is_leader:
            logger.info("[Leader] Node %s became leader", self.node_id)
            self._callback()
        else:
            logger.info("[Leader] Node %s is now a follower", self.node_id)

    def is_current_leader(self) -> bool:
        with self._lock:
            return self._is_leader