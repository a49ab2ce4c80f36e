"""Command that runs the task scheduler server."""

from __future__ import annotations

import argparse
import contextlib
import logging

from sqlalchemy.exc import SQLAlchemyError

from . import metrics
from .api import create_app
from .cluster import Heartbeater, LeaderElector
from .database import init_engine
from .queue import PriorityQueue
from .repository import TaskRepository
from .scheduler import TaskScheduler
from .worker import WorkerPool

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse the command-line options."""
    parser = argparse.ArgumentParser(
        prog="taskscheduler",
        description="Run the distributed task scheduler API server.",
    )
    parser.add_argument("--host", default="0.0.0.0", help="address to listen on")
    parser.add_argument("--port", type=int, default=8080, help="port to listen on")
    parser.add_argument("--workers", type=int, default=4, help="number of worker threads")
    parser.add_argument(
        "--database-url",
        default=None,
        help="database URL; built from the DB_* environment variables if omitted",
    )
    parser.add_argument(
        "--heartbeat-interval",
        type=float,
        default=5.0,
        help="seconds between heartbeats",
    )
    return parser.parse_args(argv)


def _on_leadership() -> None:
    logger.info("[Cluster] I am the leader. I can assign tasks.")


def main(argv: list[str] | None = None) -> int:
    """Start the database, workers, cluster loops and HTTP server; return an exit status."""
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")

    registry = metrics.init(metrics.Registry())

    try:
        engine = init_engine(args.database_url)
    except (SQLAlchemyError, ImportError) as exc:
        logger.error("failed to connect to database: %s", exc)
        return 1

    with contextlib.ExitStack() as stack:
        stack.callback(engine.dispose)

        repo = TaskRepository(engine)
        queue = PriorityQueue()
        scheduler = TaskScheduler(queue, repo)
        pool = WorkerPool(queue, repo, args.workers)

        scheduler.recover_unfinished_tasks()

        pool.start()
        stack.callback(pool.stop)

        leader = LeaderElector(_on_leadership)
        leader.start()
        stack.callback(leader.stop)

        heartbeater = Heartbeater(leader.node_id, args.heartbeat_interval)
        heartbeater.start()
        stack.callback(heartbeater.stop)

        app = create_app(scheduler, registry)
        logger.info("Server running at http://localhost:%d", args.port)
        app.run(host=args.host, port=args.port)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())