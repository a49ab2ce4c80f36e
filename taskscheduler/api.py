"""HTTP routes for submitting and inspecting tasks."""

from __future__ import annotations

import json
from typing import Any

from flask import Flask, Response, jsonify, request

from . import metrics
from .models import TaskPriority
from .scheduler import TaskScheduler

_PRIORITY_ERROR = "invalid priority (must be high, medium, or low)"

_ERROR_SCHEMA = {"type": "object", "additionalProperties": {"type": "string"}}

_SWAGGER_INDEX = """<!DOCTYPE html>
<html lang="en">
<head><meta charset="utf-8"><title>Swagger UI</title></head>
<body>
<h1>Distributed Task Scheduler API</h1>
<p>The OpenAPI description is available at <a href="doc.json">doc.json</a>.</p>
</body>
</html>
"""


class _BadRequest(Exception):
    """The request body does not describe a valid task."""


def swagger_spec() -> dict[str, Any]:
    """Return the Swagger 2.0 description of the API."""
    return {
        "schemes": ["http"],
        "swagger": "2.0",
        "info": {
            "description": "API for scheduling tasks",
            "title": "Distributed Task Scheduler API",
            "contact": {},
            "version": "1.0",
        },
        "host": "localhost:8080",
        "basePath": "/",
        "paths": {
            "/api/v1/tasks": {
                "get": {
                    "description": "Returns a list of all tasks",
                    "produces": ["application/json"],
                    "tags": ["Tasks"],
                    "summary": "Get all tasks",
                    "responses": {
                        "200": {
                            "description": "OK",
                            "schema": {
                                "type": "array",
                                "items": {"$ref": "#/definitions/scheduler.Task"},
                            },
                        }
                    },
                },
                "post": {
                    "description": "Submit a task with priority and JSON payload",
                    "consumes": ["application/json"],
                    "produces": ["application/json"],
                    "tags": ["Tasks"],
                    "summary": "Submit a new task",
                    "parameters": [
                        {
                            "description": "Task to submit",
                            "name": "task",
                            "in": "body",
                            "required": True,
                            "schema": {"$ref": "#/definitions/api.TaskRequest"},
                        }
                    ],
                    "responses": {
                        "202": {
                            "description": "Accepted",
                            "schema": {"$ref": "#/definitions/scheduler.Task"},
                        },
                        "400": {"description": "Bad Request", "schema": _ERROR_SCHEMA},
                    },
                },
            },
            "/tasks/{id}": {
                "get": {
                    "description": "Returns task status",
                    "produces": ["application/json"],
                    "tags": ["Tasks"],
                    "summary": "Get task by ID",
                    "parameters": [
                        {
                            "type": "string",
                            "description": "Task ID",
                            "name": "id",
                            "in": "path",
                            "required": True,
                        }
                    ],
                    "responses": {
                        "200": {
                            "description": "OK",
                            "schema": {"$ref": "#/definitions/scheduler.Task"},
                        },
                        "404": {"description": "Not Found", "schema": _ERROR_SCHEMA},
                    },
                }
            },
        },
        "definitions": {
            "api.TaskRequest": {
                "type": "object",
                "required": ["payload", "priority"],
                "properties": {
                    "payload": {},
                    "priority": {"type": "string", "example": "high"},
                },
            },
            "scheduler.Task": {
                "type": "object",
                "properties": {
                    "created_at": {"type": "string"},
                    "id": {"type": "string"},
                    "payload": {},
                    "priority": {"$ref": "#/definitions/scheduler.TaskPriority"},
                    "status": {"type": "string"},
                },
            },
            "scheduler.TaskPriority": {
                "type": "integer",
                "enum": [0, 1, 2],
                "x-enum-varnames": ["High", "Medium", "Low"],
            },
        },
    }


def _required_error(field: str) -> str:
    return (
        f"Key: 'TaskRequest.{field}' Error:Field validation for '{field}' "
        "failed on the 'required' tag"
    )


def _parse_task_request(raw: bytes) -> tuple[TaskPriority, Any]:
    if not raw.strip():
        raise _BadRequest("EOF")
    try:
        body = json.loads(raw)
    except ValueError as exc:
        raise _BadRequest(f"invalid JSON: {exc}") from exc
    if not isinstance(body, dict):
        raise _BadRequest("request body must be a JSON object")

    priority = body.get("priority")
    payload = body.get("payload")
    if priority is not None and not isinstance(priority, str):
        raise _BadRequest("priority must be a string")

    missing = [
        field
        for field, absent in (("Priority", not priority), ("Payload", payload is None))
        if absent
    ]
    if missing:
        raise _BadRequest("\n".join(_required_error(f) for f in missing))

    try:
        return TaskPriority.from_name(priority), payload
    except ValueError as exc:
        raise _BadRequest(_PRIORITY_ERROR) from exc


def register_routes(
    app: Flask, scheduler: TaskScheduler, registry: metrics.Registry | None = None
) -> None:
    """Attach the task, metrics and documentation routes to ``app``."""
    registry = metrics.REGISTRY if registry is None else registry

    @app.post("/api/v1/tasks")
    def submit_task():
        try:
            priority, payload = _parse_task_request(request.get_data())
        except _BadRequest as exc:
            return jsonify({"error": str(exc)}), 400
        task = scheduler.submit_task(priority, payload)
        return jsonify(task.to_dict()), 202

    @app.get("/api/v1/tasks/<task_id>")
    def get_task(task_id: str):
        task = scheduler.get_task(task_id)
        if task is None:
            return jsonify({"error": "task not found"}), 404
        return jsonify(task.to_dict()), 200

    @app.get("/api/v1/tasks")
    def get_all_tasks():
        return jsonify([t.to_dict() for t in scheduler.get_all_tasks()]), 200

    @app.get("/metrics")
    def metrics_endpoint():
        return Response(
            registry.render(),
            content_type="text/plain; version=0.0.4; charset=utf-8",
        )

    @app.get("/swagger/", defaults={"resource": "index.html"})
    @app.get("/swagger/<path:resource>")
    def swagger(resource: str):
        if resource == "doc.json":
            return jsonify(swagger_spec())
        if resource == "index.html":
            return Response(_SWAGGER_INDEX, content_type="text/html; charset=utf-8")
        return Response("404 page not found", status=404, content_type="text/plain")


def create_app(
    scheduler: TaskScheduler, registry: metrics.Registry | None = None
) -> Flask:
    """Build a Flask application serving ``scheduler``."""
    app = Flask(__name__)
    register_routes(app, scheduler, registry)
    return app