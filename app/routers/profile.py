from fastapi import APIRouter, Depends

from app.core.api_docs import error_responses
from app.core.field_mapping import BUSINESS_PROFILE_FIELDS
from app.core.security_current import get_current_user, get_data_store
from app.models.user import User
from app.schemas.profile import BusinessProfileOut, BusinessProfileUpdate
from app.services.data_store import DataStore
from app.services.profile_service import resolve_business_profile

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get(
    "",
    response_model=BusinessProfileOut,
    summary="Get business profile",
    description="Fields never filled in come back as placeholders; email falls back to the account email.",
    responses=error_responses(401, 500, 502),
)
def get_profile(
    store: DataStore = Depends(get_data_store),
    user: User = Depends(get_current_user),
):
    profile = store.get_business_profile()
    return BusinessProfileOut.model_validate(resolve_business_profile(profile, user_email=user.email))


@router.patch(
    "",
    response_model=BusinessProfileOut,
    summary="Update business profile",
    responses=error_responses(401, 422, 500, 502),
)
def update_profile(
    payload: BusinessProfileUpdate,
    store: DataStore = Depends(get_data_store),
    user: User = Depends(get_current_user),
):
    values = BUSINESS_PROFILE_FIELDS.to_store(payload.model_dump(by_alias=True, exclude_unset=True))
    profile = store.upsert_business_profile(values)
    return BusinessProfileOut.model_validate(resolve_business_profile(profile, user_email=user.email))
