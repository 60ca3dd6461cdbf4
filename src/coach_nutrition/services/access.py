"""Ownership policy shared by foods, recipes and diet plans."""

from typing import Protocol
from uuid import UUID

from coach_nutrition.domain.errors import ForbiddenError
from coach_nutrition.domain.models import Actor


class OwnedResource(Protocol):
    """Record that is either platform-owned or owned by its creator."""

    is_system: bool
    is_published: bool
    created_by: UUID | None


def can_mutate(resource: OwnedResource, actor: Actor | None) -> bool:
    """Return whether the actor may update or delete the resource."""
    if actor is None:
        return False
    if actor.is_super_admin:
        return True
    if resource.is_system:
        return False
    return resource.created_by == actor.id


def can_view(resource: OwnedResource, actor: Actor | None) -> bool:
    """Return whether the actor may read the resource."""
    if actor is not None and (actor.is_super_admin or resource.created_by == actor.id):
        return True
    return resource.is_system and resource.is_published


def ensure_can_mutate(resource: OwnedResource, actor: Actor, label: str) -> None:
    """Raise ``ForbiddenError`` unless the actor may change the resource."""
    if can_mutate(resource, actor):
        return
    if resource.is_system:
        raise ForbiddenError(f"Cannot modify system {label}s")
    raise ForbiddenError(f"You can only modify your own {label}s")
