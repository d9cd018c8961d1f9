import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from mobile_clinic.core.policy import Identity
from mobile_clinic.core.security import create_access_token
from mobile_clinic.core.settings import Settings
from mobile_clinic.db.session import get_db
from mobile_clinic.deps import get_identity, get_settings
from mobile_clinic.schemas.auth import IdentityOut, LoginRequest, Token
from mobile_clinic.services.users import get_or_create_user

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger("mobile_clinic.auth")


@router.post("/login", response_model=Token)
def login(
    payload: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user, created = get_or_create_user(db, payload.username)
    if created:
        logger.info("Created user %s on first login", user.username)
    token = create_access_token(
        user_id=user.id,
        username=user.username,
        secret=settings.secret_key,
        alg=settings.jwt_alg,
        expires_minutes=settings.access_token_expire_minutes,
    )
    return Token(token=token, user=IdentityOut(id=user.id, username=user.username))


@router.get("/me", response_model=IdentityOut)
def me(identity: Identity = Depends(get_identity)):
    return IdentityOut(id=identity.id, username=identity.username)
