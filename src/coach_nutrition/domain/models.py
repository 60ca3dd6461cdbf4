"""Shared domain models."""

from dataclasses import dataclass, field
from uuid import UUID

SUPER_ADMIN_ROLE = "super_admin"


@dataclass(frozen=True)
class Actor:
    """Authenticated caller performing an operation."""

    id: UUID
    roles: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_super_admin(self) -> bool:
        return SUPER_ADMIN_ROLE in self.roles
