"""Bearer token authentication dependencies."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from coach_nutrition.config import parse_roles
from coach_nutrition.domain.models import Actor

if TYPE_CHECKING:
    from coach_nutrition.config import Settings
    from coach_nutrition.containers import AppContainer

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_actor(token: str, settings: Settings) -> Actor:
    """Decode an access token into the acting user."""
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except JWTError as exc:
        raise _unauthorized("Invalid access token") from exc
    subject = payload.get("sub")
    if not subject:
        raise _unauthorized("Invalid access token")
    try:
        actor_id = UUID(str(subject))
    except ValueError as exc:
        raise _unauthorized("Invalid access token") from exc
    return Actor(id=actor_id, roles=parse_roles(payload.get("roles")))


async def optional_actor(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Actor | None:
    """Return the caller when a bearer token is sent."""
    if credentials is None:
        return None
    container: AppContainer = request.app.state.container
    return decode_actor(credentials.credentials, container.settings)


async def require_actor(actor: Actor | None = Depends(optional_actor)) -> Actor:
    """Require an authenticated caller."""
    if actor is None:
        raise _unauthorized("Authentication required")
    return actor
