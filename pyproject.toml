[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "taskscheduler"
version = "1.0.0"
description = "Priority task scheduler with a worker pool, a JSON HTTP API, database persistence and metrics"
requires-python = ">=3.10"
keywords = ["task", "scheduler", "queue", "priority", "worker", "flask", "sqlalchemy", "metrics"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
]
dependencies = [
    "flask",
    "sqlalchemy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
taskscheduler = "taskscheduler.main:main"

[tool.hatch.build.targets.wheel]
packages = ["taskscheduler"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]
