"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    environment: str = _ENVIRONMENT
    debug: bool = False

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_roles(raw: object) -> frozenset[str]:
    """Parse the roles claim of an access token.

    Accepts a list of role names or a comma-separated string.
    """
    if raw is None:
        return frozenset()
    if isinstance(raw, str):
        chunks = raw.split(",")
    elif isinstance(raw, list | tuple | set | frozenset):
        chunks = [str(item) for item in raw]
    else:
        return frozenset()
    roles: set[str] = set()
    for chunk in chunks:
        value = chunk.strip().lower()
        if value:
            roles.add(value)
    return frozenset(roles)
