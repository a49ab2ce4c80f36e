"""Database connection set-up and the task table."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

metadata = MetaData()

tasks_table = Table(
    "tasks",
    metadata,
    Column("id", String, primary_key=True),
    Column("priority", Integer, index=True, nullable=False),
    Column("payload", JSON().with_variant(JSONB(), "postgresql")),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("status", String, nullable=False),
)


def database_url_from_env(environ: Mapping[str, str] | None = None) -> str:
    """Build a PostgreSQL URL from the DB_HOST, DB_PORT, DB_USER, DB_PASSWORD and DB_NAME variables."""
    env = os.environ if environ is None else environ
    port = env.get("DB_PORT") or None
    url = URL.create(
        "postgresql",
        username=env.get("DB_USER") or None,
        password=env.get("DB_PASSWORD") or None,
        host=env.get("DB_HOST") or None,
        port=int(port) if port else None,
        database=env.get("DB_NAME") or None,
        query={"sslmode": "disable"},
    )
    return url.render_as_string(hide_password=False)


def init_engine(url: str | URL | None = None) -> Engine:
    """Connect to the database (from the environment if no URL is given) and create the tables."""
    target = make_url(url if url is not None else database_url_from_env())
    options: dict = {}
    if target.get_backend_name() == "sqlite":
        options["connect_args"] = {"check_same_thread": False}
        if target.database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
    engine = create_engine(target, **options)
    metadata.create_all(engine)
    logger.info("[Database] Connected and migrated successfully")
    return engine