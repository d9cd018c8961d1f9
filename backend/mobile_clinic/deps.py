import logging

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from mobile_clinic.core.errors import Forbidden, Unauthorized
from mobile_clinic.core.policy import ANONYMOUS, Identity
from mobile_clinic.core.security import decode_access_token
from mobile_clinic.core.settings import Settings
from mobile_clinic.db.session import get_db
from mobile_clinic.services.users import get_active_user

logger = logging.getLogger("mobile_clinic.auth")


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _reject_or_anonymous(settings: Settings, reason: str) -> Identity:
    if settings.strict_auth:
        raise Unauthorized(reason)
    return ANONYMOUS


def get_identity(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    authorization: str | None = Header(default=None),
) -> Identity:
    if not authorization or not authorization.lower().startswith("bearer "):
        return _reject_or_anonymous(settings, "Missing bearer token")
    token = authorization.split(" ", 1)[1].strip()
    payload = decode_access_token(token, secret=settings.secret_key, alg=settings.jwt_alg)
    if payload is None:
        logger.info("Rejected bearer token (bad signature or expired)")
        return _reject_or_anonymous(settings, "Invalid token")
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return _reject_or_anonymous(settings, "Invalid token")

    user = get_active_user(db, user_id)
    if user is None:
        return _reject_or_anonymous(settings, "Inactive user")
    return Identity(id=user.id, username=user.username)


def require_action(action: str):
    def _inner(request: Request, identity: Identity = Depends(get_identity)) -> Identity:
        policy = request.app.state.authorization_policy
        if not policy(identity, action):
            raise Forbidden(f"Not allowed to perform {action}")
        return identity

    return _inner
