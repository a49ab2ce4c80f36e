# taskscheduler

A priority task scheduler. Tasks are submitted over a JSON HTTP API with a
priority of `high`, `medium` or `low`, stored in a database through
SQLAlchemy, and handed to a pool of worker threads that always take the
highest-priority, oldest task first. Pending and running tasks are put back
on the queue when the service starts. The service also runs a leader
election loop and a heartbeat, and exposes metrics in the Prometheus text
format.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Running the service

```
taskscheduler [--host HOST] [--port PORT] [--workers N]
              [--database-url URL] [--heartbeat-interval SECONDS]
```

| Option                 | Default   | Meaning                                  |
|------------------------|-----------|------------------------------------------|
| `--host`               | `0.0.0.0` | address to listen on                     |
| `--port`               | `8080`    | port to listen on                        |
| `--workers`            | `4`       | number of worker threads                 |
| `--database-url`       | from env  | SQLAlchemy database URL                  |
| `--heartbeat-interval` | `5.0`     | seconds between heartbeat log lines      |

Without `--database-url`, a PostgreSQL URL is built from the environment
(with `sslmode=disable`):

| Variable      | Meaning           |
|---------------|-------------------|
| `DB_HOST`     | database host     |
| `DB_PORT`     | database port     |
| `DB_USER`     | database user     |
| `DB_PASSWORD` | database password |
| `DB_NAME`     | database name     |
| `NODE_ID`     | this node's name (optional; `node-HHMMSS` from the current time if unset) |

```
export DB_HOST=localhost DB_PORT=5432 DB_USER=user DB_PASSWORD=password DB_NAME=tasks
taskscheduler
```

A PostgreSQL driver for SQLAlchemy is not installed with this package;
install one yourself, or point `--database-url` at any other database
SQLAlchemy can reach, for example `sqlite:///tasks.db`. The `tasks` table is
created on start-up if it does not exist. If the database cannot be reached
the command logs the error and exits with status 1.

## HTTP API

| Method | Path                  | Description                              |
|--------|-----------------------|------------------------------------------|
| POST   | `/api/v1/tasks`       | submit a task; answers `202 Accepted`    |
| GET    | `/api/v1/tasks/<id>`  | fetch one task; `404` if it is unknown   |
| GET    | `/api/v1/tasks`       | list all tasks                           |
| GET    | `/metrics`            | metrics in Prometheus text format        |
| GET    | `/swagger/doc.json`   | the API description (Swagger 2.0)        |
| GET    | `/swagger/index.html` | a small page linking to `doc.json`       |

Submitting a task:

```
curl -X POST http://localhost:8080/api/v1/tasks \
     -H 'Content-Type: application/json' \
     -d '{"priority": "high", "payload": {"action": "send_email", "to": "user@example.com"}}'
```

Both `priority` and `payload` are required. A missing field, a body that is
not a JSON object, or a priority other than `high`, `medium` or `low` is
answered with `400 Bad Request` and a JSON `{"error": ...}` body. The
response is the new task:

```json
{"id": "...", "priority": 0, "payload": {...},
 "created_at": "2024-01-01T12:00:00.000000Z", "status": "pending"}
```

`priority` is `0` for high, `1` for medium and `2` for low. `status` moves
from `pending` to `running` to `completed` as a worker handles the task.

## Using it as a library

```python
from taskscheduler.database import init_engine
from taskscheduler.repository import TaskRepository
from taskscheduler.queue import PriorityQueue
from taskscheduler.scheduler import TaskScheduler
from taskscheduler.worker import WorkerPool
from taskscheduler.models import TaskPriority

engine = init_engine("sqlite://")
repo = TaskRepository(engine)
queue = PriorityQueue()
scheduler = TaskScheduler(queue, repo)

pool = WorkerPool(queue, repo, worker_num=2)
pool.start()
task = scheduler.submit_task(TaskPriority.HIGH, {"action": "resize"})
...
pool.stop()
```

- `taskscheduler.models`: `TaskPriority` (with `from_name`), `TaskStatus`,
  the `Task` dataclass (with `to_dict`) and `new_task`.
- `taskscheduler.queue.PriorityQueue`: thread-safe; `push_task`,
  `pop_task(timeout=None)` (returns `None` when the timeout runs out) and
  `len()`.
- `taskscheduler.repository.TaskRepository`: `create`, `update_status`,
  `get_by_id`, `get_unfinished_tasks`, `get_all`.
- `taskscheduler.scheduler.TaskScheduler`: `submit_task`, `get_task`
  (cache first, then the database; `None` if unknown), `get_all_tasks` and
  `recover_unfinished_tasks` (returns how many tasks were requeued).
  Database errors are logged rather than raised.
- `taskscheduler.worker.WorkerPool`: `start`, `stop` and `process_task`.
- `taskscheduler.cluster`: `LeaderElector`, `Heartbeater` and
  `generate_node_id`.
- `taskscheduler.database`: `database_url_from_env` and `init_engine`.
- `taskscheduler.api`: `create_app`, `register_routes` and `swagger_spec`.
- `taskscheduler.metrics`: `Counter`, `Gauge`, `Histogram`, `Registry` and
  `init`, which registers the scheduler's metrics with a registry.

## Metrics

| Name                       | Kind      | Labels     |
|----------------------------|-----------|------------|
| `task_submitted_total`     | counter   | `priority` |
| `task_processed_total`     | counter   | `status`   |
| `task_queue_length`        | gauge     |            |
| `task_processing_seconds`  | histogram | `priority` |

`task_submitted_total` is registered and exposed, but nothing in the package
increments it.

## What it does not do

- Workers do not run the payload. Processing a task marks it `running`,
  waits a fixed time (`work_duration`, 2 seconds by default) and marks it
  `completed`.
- Leader election is simulated: every 3 seconds the node becomes leader with
  a one-in-three chance. Being leader only writes a log line; nodes do not
  coordinate with each other or share work.
- The heartbeat only writes a log line; it is not sent to other nodes.
- `/swagger/` serves the API description as JSON and a plain page linking to
  it, not an interactive documentation viewer.