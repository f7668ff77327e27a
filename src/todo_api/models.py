from __future__ import annotations

from typing import TypedDict


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A lightweight domain model representing a Todo item as held by the
    repositories.

    Fields:
    - id: Unique integer identifier, assigned by the repository
    - text: Todo text
    - completed: Boolean completion flag (False on creation)
    """

    id: int
    text: str
    completed: bool


# PUBLIC_INTERFACE
class LabelEntity(TypedDict):
    """A label that can be attached to todos in the frontend."""

    id: int
    name: str
