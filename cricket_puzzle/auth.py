"""
Bearer-token identity for the puzzle routes.

Login lives elsewhere; all we need here is "which user id is this token
for". Tokens are the user id signed with a timestamp (itsdangerous), so
they can be checked without a database round trip.
"""

from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from itsdangerous import BadSignature, SignatureExpired, TimestampSigner

from . import config

_bearer = HTTPBearer(auto_error=False)


def _signer() -> TimestampSigner:
    return TimestampSigner(config.SECRET_KEY, salt="cricket-puzzle-user")


def issue_token(user_id: str) -> str:
    return _signer().sign(str(user_id).encode()).decode()


def verify_token(token: str, max_age: Optional[int] = None) -> Optional[str]:
    """User id inside a valid token, or None when tampered/expired."""
    try:
        raw = _signer().unsign(token, max_age=max_age or config.TOKEN_MAX_AGE_SECONDS)
    except SignatureExpired:
        return None
    except BadSignature:
        return None
    return raw.decode()


def get_requester_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Optional[str]:
    """
    FastAPI dependency.
    - no Authorization header -> None (anonymous), unless REQUIRE_AUTH is on
    - bad or expired token -> 401
    """
    if credentials is None:
        if config.REQUIRE_AUTH:
            raise HTTPException(status_code=401, detail="No token provided")
        return None
    user_id = verify_token(credentials.credentials)
    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid token")
    return user_id
