"""Authentication API endpoints."""

from fastapi import APIRouter

from maji.api.deps import AuthServiceDep, CurrentUser
from maji.core.config import settings
from maji.schemas.user import OtpRequest, OtpRequestResponse, OtpVerify, TokenResponse, UserResponse

router = APIRouter()


@router.post("/otp/request", response_model=OtpRequestResponse)
async def request_otp(body: OtpRequest, auth_service: AuthServiceDep):
    """Send a one-time login code to a phone number.

    Raises:
        400: Invalid phone number
    """
    expires_in = await auth_service.request_otp(body.phone)
    return OtpRequestResponse(expires_in=expires_in)


@router.post("/otp/verify", response_model=TokenResponse)
async def verify_otp(body: OtpVerify, auth_service: AuthServiceDep):
    """Verify a login code and get an access token.

    First-time phones get a new CITIZEN account.

    Raises:
        400: Invalid or expired code
        429: Too many failed attempts
    """
    user, token, is_new_user = await auth_service.verify_otp(body.phone, body.code)
    return TokenResponse(
        access_token=token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        is_new_user=is_new_user,
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: CurrentUser):
    """Get current user information."""
    return current_user
