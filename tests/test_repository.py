import pytest
from sqlalchemy.exc import IntegrityError

from taskscheduler.database import init_engine
from taskscheduler.models import TaskPriority, TaskStatus, new_task
from taskscheduler.repository import TaskRepository


@pytest.fixture
def repo(tmp_path):
    engine = init_engine(f"sqlite:///{tmp_path / 'tasks.db'}")
    yield TaskRepository(engine)
    engine.dispose()


def test_create_and_get_round_trip(repo):
    task = new_task(TaskPriority.HIGH, {"action": "send_email", "to": "user@example.com"})
    repo.create(task)
    loaded = repo.get_by_id(task.id)
    assert loaded == task


def test_get_missing_returns_none(repo):
    assert repo.get_by_id("missing") is None


def test_create_duplicate_raises(repo):
    task = new_task(TaskPriority.LOW, None)
    repo.create(task)
    with pytest.raises(IntegrityError):
        repo.create(task)


def test_update_status(repo):
    task = new_task(TaskPriority.MEDIUM, [1, 2, 3])
    repo.create(task)
    assert repo.update_status(task.id, TaskStatus.RUNNING) is True
    assert repo.get_by_id(task.id).status == "running"


def test_update_status_missing(repo):
    assert repo.update_status("missing", "completed") is False


def test_get_unfinished_tasks(repo):
    tasks = [new_task(TaskPriority.LOW, i) for i in range(4)]
    for task in tasks:
        repo.create(task)
    repo.update_status(tasks[1].id, "running")
    repo.update_status(tasks[2].id, "completed")
    repo.update_status(tasks[3].id, "failed")
    unfinished = {t.id: t.status for t in repo.get_unfinished_tasks()}
    assert unfinished == {tasks[0].id: "pending", tasks[1].id: "running"}


def test_get_all(repo):
    tasks = [new_task(p, None) for p in TaskPriority]
    for task in tasks:
        repo.create(task)
    repo.update_status(tasks[0].id, "completed")
    assert {t.id for t in repo.get_all()} == {t.id for t in tasks}


def test_get_all_empty(repo):
    assert repo.get_all() == []