"""Priority task scheduler with a worker pool, a Flask HTTP API, SQLAlchemy persistence and metrics."""

__version__ = "1.0.0"