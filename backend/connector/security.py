from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple
from flask import g
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired

from .errors import AuthenticationRequired
from .models.enums import Role


@dataclass(frozen=True)
class Actor:
    """The principal performing a request, as supplied by the identity service.

    Passed explicitly into every lifecycle operation; nothing reads identity
    from global state.
    """

    user_id: str
    roles: frozenset = field(default_factory=frozenset)

    @classmethod
    def of(cls, user_id: str, roles: Iterable[Role | str] = ()) -> "Actor":
        return cls(user_id=str(user_id), roles=frozenset(_parse_roles(roles)))

    def has_role(self, role: Role) -> bool:
        return role in self.roles

    @property
    def is_admin(self) -> bool:
        return Role.ADMIN in self.roles


def _parse_roles(raw: Iterable[Role | str]) -> list[Role]:
    roles: list[Role] = []
    for r in raw or ():
        try:
            roles.append(r if isinstance(r, Role) else Role(str(r).strip().lower()))
        except ValueError:
            # Unknown roles from the identity service carry no capability here
            continue
    return roles


def _serializer(secret: str | None = None) -> URLSafeTimedSerializer:
    secret = secret or os.getenv("SECRET_KEY", "change-me")
    # Salt provides namespace isolation for tokens
    return URLSafeTimedSerializer(secret_key=secret, salt="auth-token")


def issue_token(user_id: str, roles: Iterable[Role | str], secret: str | None = None) -> str:
    """Issue a signed token for a user.

    Payload is minimal: {"id": str, "roles": [str, ...]}
    """
    s = _serializer(secret)
    return s.dumps({"id": str(user_id), "roles": sorted(r.value for r in _parse_roles(roles))})


def verify_token(token: str, max_age: int, secret: str | None = None) -> Tuple[Optional[str], list[Role]]:
    """Verify a token and return (user_id, roles) if valid, else (None, [])."""
    try:
        data = _serializer(secret).loads(token, max_age=max_age)
    except (BadSignature, SignatureExpired):
        return (None, [])
    if not isinstance(data, dict) or not data.get("id"):
        return (None, [])
    return (str(data["id"]), _parse_roles(data.get("roles") or []))


def current_actor() -> Actor:
    """Actor attached to the current request by the API's before_request hook."""
    actor = getattr(g, "actor", None)
    if actor is None:
        raise AuthenticationRequired()
    return actor
