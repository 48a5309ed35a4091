"""
Task blueprint. Every query is scoped to the authenticated user; a task that
belongs to someone else is reported as not found.
"""
from __future__ import annotations

from typing import Tuple

from flask import Blueprint, request, jsonify, abort, g

from models import storage
from models.base_model import utcnow
from models.task import Task, TASK_STATUSES
from models.schemas.task import TaskCreateSchema, TaskUpdateSchema, TaskOutSchema, STATUS_ERROR
from utils.decorators import jwt_required

bp = Blueprint("tasks", __name__)

task_create_schema = TaskCreateSchema()
task_update_schema = TaskUpdateSchema()
task_out_schema = TaskOutSchema()
tasks_out_schema = TaskOutSchema(many=True)

MAX_LIMIT = 100
DEFAULT_LIMIT = 50


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", str(DEFAULT_LIMIT)))
        page = max(page, 1)
        limit = max(1, min(limit, MAX_LIMIT))
        return page, limit
    except ValueError:
        abort(400, description="page and limit must be integers")


def parse_status(value: str | None) -> str | None:
    if value is None:
        return None
    if value not in TASK_STATUSES:
        abort(422, description=STATUS_ERROR)
    return value


def get_owned_task_or_404(task_id: str) -> Task:
    task = (
        storage.get_session()
        .query(Task)
        .filter(Task.id == task_id, Task.user_id == g.current_user_id)
        .first()
    )
    if not task:
        abort(404, description="Task not found or you do not have permission to access it")
    return task


def _list_response(status: str | None):
    page, limit = parse_pagination()
    query = storage.get_session().query(Task).filter(Task.user_id == g.current_user_id)
    if status:
        query = query.filter(Task.status == status)

    total = query.count()
    rows = query.order_by(Task.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
    return jsonify(
        {
            "message": "Tasks retrieved successfully",
            "data": tasks_out_schema.dump(rows),
            "meta": {"page": page, "limit": limit, "total": total},
        }
    ), 200


@bp.get("/tasks")
@jwt_required()
def list_tasks():
    """
    List the current user's tasks, newest first
    ---
    tags:
      - Tasks
    security:
      - Bearer: []
    parameters:
      - { in: query, name: status, type: string, enum: [pending, in-progress, completed] }
      - { in: query, name: page, type: integer, default: 1 }
      - { in: query, name: limit, type: integer, default: 50, maximum: 100 }
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
    """
    return _list_response(parse_status(request.args.get("status")))


@bp.get("/tasks/status/<status>")
@jwt_required()
def list_tasks_by_status(status: str):
    """
    List the current user's tasks with a given status
    ---
    tags:
      - Tasks
    security:
      - Bearer: []
    parameters:
      - { in: path, name: status, type: string, required: true, enum: [pending, in-progress, completed] }
    responses:
      200: { description: OK }
      422: { description: Unknown status }
    """
    return _list_response(parse_status(status))


@bp.get("/tasks/<task_id>")
@jwt_required()
def get_task(task_id: str):
    """
    Get one task
    ---
    tags:
      - Tasks
    security:
      - Bearer: []
    parameters:
      - { in: path, name: task_id, type: string, required: true }
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    task = get_owned_task_or_404(task_id)
    return jsonify({"message": "Task retrieved successfully", "data": task_out_schema.dump(task)}), 200


@bp.post("/tasks")
@jwt_required()
def create_task():
    """
    Create a task
    ---
    tags:
      - Tasks
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [title]
          properties:
            title: { type: string, maxLength: 200 }
            description: { type: string, maxLength: 1000 }
            status: { type: string, enum: [pending, in-progress, completed], default: pending }
    responses:
      201: { description: Created }
      422: { description: Validation error }
    """
    payload = request.get_json(silent=True) or {}
    data = task_create_schema.load(payload)

    task = Task(
        user_id=g.current_user_id,
        title=data["title"],
        description=data.get("description"),
        status=data["status"],
    )
    storage.new(task)
    storage.save()
    return jsonify({"message": "Task created successfully", "data": task_out_schema.dump(task)}), 201


@bp.put("/tasks/<task_id>")
@jwt_required()
def update_task(task_id: str):
    """
    Update a task (partial; at least one field)
    ---
    tags:
      - Tasks
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - { in: path, name: task_id, type: string, required: true }
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            title: { type: string, maxLength: 200 }
            description: { type: string, maxLength: 1000 }
            status: { type: string, enum: [pending, in-progress, completed] }
    responses:
      200: { description: OK }
      404: { description: Not found }
      422: { description: Validation error }
    """
    task = get_owned_task_or_404(task_id)
    payload = request.get_json(silent=True) or {}
    data = task_update_schema.load(payload)

    for key, value in data.items():
        setattr(task, key, value)
    task.updated_at = utcnow()
    storage.new(task)
    storage.save()
    return jsonify({"message": "Task updated successfully", "data": task_out_schema.dump(task)}), 200


@bp.delete("/tasks/<task_id>")
@jwt_required()
def delete_task(task_id: str):
    """
    Delete a task
    ---
    tags:
      - Tasks
    security:
      - Bearer: []
    parameters:
      - { in: path, name: task_id, type: string, required: true }
    responses:
      200: { description: Deleted }
      404: { description: Not found }
    """
    task = get_owned_task_or_404(task_id)
    body = task_out_schema.dump(task)
    storage.delete(task)
    storage.save()
    return jsonify({"message": "Task deleted successfully", "data": body}), 200
