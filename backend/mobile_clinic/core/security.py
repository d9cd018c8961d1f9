from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt


def create_access_token(
    *,
    user_id: int,
    username: str,
    secret: str,
    alg: str,
    expires_minutes: int,
) -> str:
    """Sign a bearer token naming the user; there is no password behind it."""
    issued = datetime.now(timezone.utc)
    claims: Dict[str, Any] = {
        "sub": str(user_id),
        "username": username,
        "iat": int(issued.timestamp()),
        "exp": int((issued + timedelta(minutes=expires_minutes)).timestamp()),
    }
    return jwt.encode(claims, secret, algorithm=alg)


def decode_access_token(token: str, *, secret: str, alg: str) -> Optional[Dict[str, Any]]:
    """Return the token claims, or None when the signature or expiry check fails."""
    try:
        return jwt.decode(token, secret, algorithms=[alg])
    except JWTError:
        return None
