from __future__ import annotations

from sqlalchemy.exc import IntegrityError


class SchemaError(Exception):
    """Tables or indexes could not be created; the service must not start."""


class ConstraintError(Exception):
    """A write violated a uniqueness or foreign-key constraint."""


class NotFoundError(Exception):
    """A referenced recipe, cuisine or user does not exist."""

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class AuthError(Exception):
    """Missing or invalid credentials."""


class ApiError(Exception):
    def __init__(
        self, status_code: int, message: str, code: str | None = None, details: list[str] | None = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.code = code
        self.details = details


def is_unique_violation(exc: IntegrityError, column: str | None = None) -> bool:
    """Return True when ``exc`` is a SQLite UNIQUE failure (optionally on ``table.column``)."""
    orig = exc.orig
    error_name = getattr(orig, "sqlite_errorname", None)
    message = str(orig)
    if error_name is not None and error_name not in {"SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY"}:
        return False
    if not message.startswith("UNIQUE constraint failed"):
        return False
    return column is None or column in message
