from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.api_docs import error_responses
from app.core.deps import get_db
from app.core.security import create_access_token, hash_password, verify_password
from app.core.security_current import get_current_user
from app.models.business import BusinessProfile
from app.models.user import User
from app.schemas.auth import LoginIn, RegisterIn, TokenOut, UserProfileOut

router = APIRouter(prefix="/auth", tags=["auth"])
TOKEN_RESPONSE = {
    200: {
        "description": "Access token",
        "content": {
            "application/json": {
                "example": {
                    "access_token": "access-token",
                    "token_type": "bearer",
                }
            }
        },
    }
}


def _authenticate_user(db: Session, email: str, password: str) -> User:
    user = db.execute(
        select(User).where(func.lower(User.email) == email.strip().lower())
    ).scalar_one_or_none()

    if not user or not verify_password(password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=401, detail="Account is disabled")

    return user


@router.post(
    "/register",
    response_model=TokenOut,
    summary="Register user",
    description="Creates the account and its business profile, then returns an access token.",
    responses={**TOKEN_RESPONSE, **error_responses(400, 422, 500)},
)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    normalized_email = payload.email.lower()
    exists = db.execute(
        select(User).where(func.lower(User.email) == normalized_email)
    ).scalar_one_or_none()
    if exists:
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        email=normalized_email,
        full_name=payload.full_name,
        hashed_password=hash_password(payload.password),
    )
    db.add(user)
    db.flush()
    db.add(BusinessProfile(user_id=user.id, business_name=payload.business_name))
    db.commit()
    return TokenOut(access_token=create_access_token(user.id))


@router.post(
    "/login",
    response_model=TokenOut,
    summary="Login",
    responses={**TOKEN_RESPONSE, **error_responses(401, 422, 500)},
)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    user = _authenticate_user(db, payload.email, payload.password)
    return TokenOut(access_token=create_access_token(user.id))


@router.post(
    "/token",
    response_model=TokenOut,
    summary="OAuth2 password token (Swagger Authorize)",
    description="Form-data login endpoint used by Swagger Authorize. Put your email in the `username` field.",
    responses={**TOKEN_RESPONSE, **error_responses(401, 422, 500)},
)
def login_for_swagger(
    db: Session = Depends(get_db),
    form_data: OAuth2PasswordRequestForm = Depends(),
):
    user = _authenticate_user(db, form_data.username, form_data.password)
    return TokenOut(access_token=create_access_token(user.id))


@router.get(
    "/me",
    response_model=UserProfileOut,
    summary="Get current user",
    responses=error_responses(401, 500),
)
def get_me(user: User = Depends(get_current_user)):
    return UserProfileOut(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        created_at=user.created_at,
    )
