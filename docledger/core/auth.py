"""Authentication module: resolves the calling principal for every request.

Public interface:
    ``Principal``     caller identity plus whether it is a human or an AI.
    ``require_auth``  FastAPI dependency returning a Principal or raising 401.

Identity itself is issued elsewhere. With ``settings.auth_enabled`` a bearer
JWT is required (``sub`` = user id, ``role`` = actor type). With auth
disabled, the ``X-User-Id`` / ``X-Actor-Type`` headers are trusted so local
development and tests can act as any caller. A request with no identity is
rejected in both modes.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import Settings
from .token_factory import decode_token
from ..exceptions import AuthenticationError
from ..models.enums import ActorType

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """The caller of an operation."""

    user_id: str
    actor_type: ActorType = ActorType.USER

    @property
    def is_human(self) -> bool:
        return self.actor_type == ActorType.USER


def _parse_actor_type(raw: Optional[str]) -> ActorType:
    if not raw:
        return ActorType.USER
    try:
        return ActorType(raw.strip().lower())
    except ValueError:
        raise AuthenticationError(f"Unknown actor type: {raw}")


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    x_user_id: Optional[str] = Header(default=None),
    x_actor_type: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> Principal:
    """Resolve the calling principal. Raises AuthenticationError (401)."""
    if not settings.auth_enabled:
        if not x_user_id or not x_user_id.strip():
            raise AuthenticationError("Missing X-User-Id header")
        return Principal(user_id=x_user_id.strip(), actor_type=_parse_actor_type(x_actor_type))

    if credentials is None:
        raise AuthenticationError("Missing authentication token")

    payload = decode_token(
        credentials.credentials, settings.jwt_secret_key, settings.jwt_algorithm
    )
    if payload is None:
        raise AuthenticationError("Invalid or expired token")
    if not payload.sub:
        raise AuthenticationError("Token has no subject")

    return Principal(user_id=payload.sub, actor_type=_parse_actor_type(payload.role))
