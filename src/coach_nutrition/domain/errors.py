"""Domain errors for nutrition calculations and persistence."""

from uuid import UUID


class NutritionError(Exception):
    """Base class for all domain errors."""


class ValidationError(NutritionError):
    """Raised when an input is rejected before any computation."""


class InvalidUnitError(ValidationError):
    """Raised when a quantity unit cannot be converted."""

    def __init__(self, unit: str, reason: str | None = None) -> None:
        self.unit = unit
        message = f"Unsupported unit: {unit!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class NotFoundError(NutritionError):
    """Raised when a referenced record does not exist."""

    def __init__(self, resource: str, resource_id: UUID | str) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found")


class ForbiddenError(NutritionError):
    """Raised when an actor may not change a record."""


class PersistenceError(NutritionError):
    """Raised when the underlying storage call fails."""
