from __future__ import annotations


class RepositoryError(Exception):
    """Base class for failures raised by repository backends."""

    message: str

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": type(self).__name__, "message": self.message}


class NotFoundError(RepositoryError):
    """The addressed entity does not exist."""

    def __init__(self, entity_id: int) -> None:
        super().__init__(f"NotFound, id is {entity_id}")
        self.entity_id = entity_id


class DuplicateError(RepositoryError):
    """
    Reserved for uniqueness violations. No backend operation raises it at the
    moment.
    """

    def __init__(self, entity_id: int) -> None:
        super().__init__(f"Duplicate data, id is {entity_id}")
        self.entity_id = entity_id


class UnexpectedError(RepositoryError):
    """Backend or connectivity failure."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Unexpected Error: [{message}]")
