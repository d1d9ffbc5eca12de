from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.deps import get_db
from app.core.errors import AuthRequired
from app.core.security import TokenValidationError, decode_access_token
from app.models.user import User
from app.services.app_state import AppState
from app.services.data_store import DataStore

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    if not token:
        raise AuthRequired()
    try:
        user_id = decode_access_token(token)
    except TokenValidationError as exc:
        raise AuthRequired(str(exc)) from exc

    user = db.execute(select(User).where(User.id == user_id)).scalar_one_or_none()
    if not user or not user.is_active:
        raise AuthRequired("User not found")
    return user


def get_data_store(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> DataStore:
    return DataStore(db, user_id=user.id)


def get_app_state(store: DataStore = Depends(get_data_store)) -> AppState:
    return AppState(store=store)
