"""API dependencies for authentication, database access and services."""

import hashlib
from typing import Annotated, Any
from uuid import UUID

from cachetools import TTLCache
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from maji.core.database import get_db
from maji.core.redis import get_redis
from maji.core.security import decode_access_token
from maji.models.user import User
from maji.services.alert_service import AlertService
from maji.services.auth_service import AuthService
from maji.services.notification_service import NotificationService
from maji.services.order_service import OrderService
from maji.services.payment_service import PaymentService
from maji.services.redis_service import RedisService
from maji.services.report_service import ReportService
from maji.services.user_service import UserService
from maji.services.vendor_service import VendorService
from maji.services.zone_service import ZoneService

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)

# Decoded JWT payloads, keyed by token hash, to skip signature checks on bursts
JWT_CACHE_TTL = 10
_token_cache: TTLCache = TTLCache(maxsize=10000, ttl=JWT_CACHE_TTL)


def _credentials_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _decode_cached(token: str) -> dict[str, Any] | None:
    key = hashlib.sha256(token.encode()).hexdigest()
    payload = _token_cache.get(key)
    if payload is None:
        payload = decode_access_token(token)
        if payload is not None:
            _token_cache[key] = payload
    return payload


async def _user_from_token(token: str, db: AsyncSession) -> User:
    payload = _decode_cached(token)
    if payload is None:
        raise _credentials_error("Invalid authentication token")

    user_id = payload.get("sub")
    if user_id is None:
        raise _credentials_error("Invalid token payload")

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        raise _credentials_error("Invalid user ID in token")

    result = await db.execute(select(User).where(User.user_id == user_uuid))
    user = result.scalar_one_or_none()
    if user is None:
        raise _credentials_error("User not found")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is not active",
        )
    return user


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Get current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer token
        db: Database session

    Returns:
        Current user, attached to the request's session

    Raises:
        HTTPException: If token is invalid or user not found
    """
    return await _user_from_token(credentials.credentials, db)


async def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(optional_security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User | None:
    """Like get_current_user, but anonymous requests yield None."""
    if credentials is None:
        return None
    return await _user_from_token(credentials.credentials, db)


async def get_current_admin_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get current user and verify they are an admin.

    Raises:
        HTTPException: If user is not an admin
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user


# Type aliases for cleaner dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_optional_user)]
AdminUser = Annotated[User, Depends(get_current_admin_user)]
DbSession = Annotated[AsyncSession, Depends(get_db)]


# =============================================================================
# Service dependency injection
# =============================================================================


async def get_redis_service() -> RedisService:
    """Get RedisService instance with shared Redis connection pool."""
    redis = await get_redis()
    return RedisService(redis)


RedisServiceDep = Annotated[RedisService, Depends(get_redis_service)]


async def get_notification_service(redis_service: RedisServiceDep) -> NotificationService:
    return NotificationService(redis_service)


NotifierDep = Annotated[NotificationService, Depends(get_notification_service)]


async def get_auth_service(db: DbSession, redis_service: RedisServiceDep) -> AuthService:
    return AuthService(db, redis_service)


async def get_order_service(db: DbSession, notifier: NotifierDep) -> OrderService:
    return OrderService(db, notifier)


async def get_payment_service(db: DbSession, notifier: NotifierDep) -> PaymentService:
    return PaymentService(db, notifier)


async def get_alert_service(db: DbSession, notifier: NotifierDep) -> AlertService:
    return AlertService(db, notifier)


async def get_report_service(
    db: DbSession, redis_service: RedisServiceDep, notifier: NotifierDep
) -> ReportService:
    return ReportService(db, redis_service, notifier)


async def get_vendor_service(db: DbSession) -> VendorService:
    return VendorService(db)


async def get_zone_service(db: DbSession) -> ZoneService:
    return ZoneService(db)


async def get_user_service(db: DbSession) -> UserService:
    return UserService(db)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]
PaymentServiceDep = Annotated[PaymentService, Depends(get_payment_service)]
AlertServiceDep = Annotated[AlertService, Depends(get_alert_service)]
ReportServiceDep = Annotated[ReportService, Depends(get_report_service)]
VendorServiceDep = Annotated[VendorService, Depends(get_vendor_service)]
ZoneServiceDep = Annotated[ZoneService, Depends(get_zone_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
