from __future__ import annotations

from fastapi import Request

from .repositories import LabelRepository, TodoRepository


# PUBLIC_INTERFACE
def get_todo_repository(request: Request) -> TodoRepository:
    """Return the todo repository the running app was composed with."""
    return request.app.state.todo_repository


# PUBLIC_INTERFACE
def get_label_repository(request: Request) -> LabelRepository:
    """Return the label repository the running app was composed with."""
    return request.app.state.label_repository
