from __future__ import annotations

from typing import Any


class OrderdeskError(Exception):
    """Base for every expected, caller-recoverable failure."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message}


class ShapeError(OrderdeskError):
    def __init__(self, message: str = "Invalid body") -> None:
        super().__init__(message)


class FieldError(OrderdeskError):
    def __init__(self, field: str, reason: str) -> None:
        super().__init__(reason)
        self.field = field

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "field": self.field}


class ConflictError(OrderdeskError):
    status_code = 409

    def __init__(self, entity: str, field: str, value: Any, message: str | None = None) -> None:
        super().__init__(message or f"{entity.capitalize()} with this {field} already exists")
        self.entity = entity
        self.field = field
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "field": self.field}


class ReferenceNotFoundError(OrderdeskError):
    def __init__(self, reference: str, value: Any, message: str | None = None) -> None:
        super().__init__(message or f"{reference.capitalize()} not found")
        self.reference = reference
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "reference": self.reference, "value": self.value}


class NoChangeError(OrderdeskError):
    def __init__(self, message: str = "No fields to update") -> None:
        super().__init__(message)


class AuthorizationError(OrderdeskError):
    status_code = 403

    def __init__(self, message: str = "Not allowed") -> None:
        super().__init__(message)


class RecordNotFoundError(OrderdeskError):
    status_code = 404

    def __init__(self, message: str = "Not Found") -> None:
        super().__init__(message)
