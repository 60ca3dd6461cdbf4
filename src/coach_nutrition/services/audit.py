"""Audit logging service."""

import logging
from dataclasses import asdict, dataclass
from typing import Protocol
from uuid import UUID

_logger = logging.getLogger(__name__)


class AuditRepository(Protocol):
    """Persistence interface for audit events."""

    def create_event(  # noqa: PLR0913
        self,
        user_id: UUID,
        entity_type: str,
        entity_id: UUID,
        event_type: str,
        before: dict[str, object] | None,
        after: dict[str, object] | None,
    ) -> None:
        """Create an audit event row."""


@dataclass
class AuditService:
    """Service for recording changes to foods, recipes and plans."""

    repository: AuditRepository

    def record_event(  # noqa: PLR0913
        self,
        user_id: UUID,
        entity_type: str,
        entity_id: UUID,
        event_type: str,
        before: dict[str, object] | None,
        after: dict[str, object] | None,
    ) -> None:
        """Persist an audit event."""
        _logger.info(
            "Audit %s %s %s by %s", event_type, entity_type, entity_id, user_id
        )
        self.repository.create_event(
            user_id=user_id,
            entity_type=entity_type,
            entity_id=entity_id,
            event_type=event_type,
            before=before,
            after=after,
        )


def audit_snapshot(record: object) -> dict[str, object]:
    """Convert a domain dataclass into a JSON-friendly dict."""
    return _jsonable(asdict(record))


def _jsonable(value: object) -> object:
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, list | tuple | set | frozenset):
        return [_jsonable(item) for item in value]
    if isinstance(value, UUID):
        return str(value)
    return value
