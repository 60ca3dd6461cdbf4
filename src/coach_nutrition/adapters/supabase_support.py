"""Helpers shared by the Supabase repositories."""

from uuid import UUID

from supabase import PostgrestAPIError

from coach_nutrition.domain.errors import PersistenceError


def execute(query, action: str):  # type: ignore[no-untyped-def]
    """Run a PostgREST query, wrapping storage failures."""
    try:
        return query.execute()
    except PostgrestAPIError as exc:
        raise PersistenceError(f"Failed to {action}") from exc


def optional_uuid(value: object) -> UUID | None:
    """Parse a nullable uuid column."""
    if value is None or value == "":
        return None
    return UUID(str(value))


def optional_float(value: object) -> float | None:
    """Parse a nullable numeric column."""
    if value is None:
        return None
    return float(value)


def returned_id(data: object, action: str) -> UUID:
    """Read the uuid returned by a Postgres function call."""
    if isinstance(data, list):
        data = data[0] if data else None
    if isinstance(data, dict):
        data = next(iter(data.values()), None)
    if not data:
        raise PersistenceError(f"Failed to {action}")
    return UUID(str(data))
