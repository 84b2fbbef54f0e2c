"""Access token issuing and verification."""

from __future__ import annotations

import os
from dataclasses import dataclass

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from dealer_api.errors import InvalidCredential, MissingCredential

TOKEN_MAX_AGE = 60 * 60 * 24
TOKEN_SALT = "access-token"


@dataclass(frozen=True, slots=True)
class Identity:
    """The verified subject of an access token."""

    uid: str
    email: str


def _serializer() -> URLSafeTimedSerializer:
    secret = os.environ.get("ACCESS_TOKEN_SECRET", "change-me")
    return URLSafeTimedSerializer(secret_key=secret, salt=TOKEN_SALT)


def issue_token(uid: str, email: str) -> str:
    return _serializer().dumps({"uid": uid, "email": email})


def verify_token(token: str | None, max_age: int = TOKEN_MAX_AGE) -> Identity:
    if not token:
        raise MissingCredential("No access token supplied")
    try:
        data = _serializer().loads(token, max_age=max_age)
    except SignatureExpired as exc:
        raise InvalidCredential("Access token expired") from exc
    except BadSignature as exc:
        raise InvalidCredential("Access token signature mismatch") from exc
    if not isinstance(data, dict) or not data.get("uid") or not data.get("email"):
        raise InvalidCredential("Access token payload is incomplete")
    return Identity(uid=str(data["uid"]), email=str(data["email"]))


def token_from_header(authorization: str | None) -> str | None:
    """Extract the credential from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, credential = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return credential.strip() or None
