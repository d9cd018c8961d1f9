from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from mobile_clinic.db.session import get_db
from mobile_clinic.deps import require_action
from mobile_clinic.schemas.user import UserCreate, UserOut
from mobile_clinic.services.users import deactivate_user, get_or_create_user, list_active_users

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db), _identity=Depends(require_action("users.read"))):
    return list_active_users(db)


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    response: Response,
    db: Session = Depends(get_db),
    _identity=Depends(require_action("users.write")),
):
    user, created = get_or_create_user(db, payload.username)
    if not created:
        response.status_code = status.HTTP_200_OK
    return user


@router.delete("/{user_id}", response_model=UserOut)
def delete_user(user_id: int, db: Session = Depends(get_db), _identity=Depends(require_action("users.write"))):
    return deactivate_user(db, user_id)
