"""Current user profile API endpoints."""

from fastapi import APIRouter

from maji.api.deps import CurrentUser, UserServiceDep
from maji.schemas.alert import ZoneSummary
from maji.schemas.user import UserProfileResponse, UserResponse, UserStats, UserUpdate

router = APIRouter()


def _profile(user, stats: dict[str, int]) -> UserProfileResponse:
    return UserProfileResponse(
        **UserResponse.model_validate(user).model_dump(),
        primary_zone=ZoneSummary.model_validate(user.primary_zone) if user.primary_zone else None,
        stats=UserStats(**stats),
    )


@router.get("/me", response_model=UserProfileResponse)
async def get_profile(current_user: CurrentUser, user_service: UserServiceDep):
    """Get the current user's profile with activity counts."""
    user, stats = await user_service.get_profile(current_user.user_id)
    return _profile(user, stats)


@router.patch("/me", response_model=UserProfileResponse)
async def update_profile(
    body: UserUpdate, current_user: CurrentUser, user_service: UserServiceDep
):
    """Update name or primary zone.

    Raises:
        404: Zone not found
    """
    user = await user_service.update_profile(
        current_user.user_id, name=body.name, primary_zone_id=body.primary_zone_id
    )
    return _profile(user, await user_service.get_stats(user.user_id))
