"""Auth service for phone + OTP login."""

import logging
import re
import secrets

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from maji.core.config import settings
from maji.core.errors import Forbidden, InvalidOtp, InvalidPhone, OtpExpired, OtpMaxAttempts
from maji.core.security import create_access_token, hash_otp, verify_otp_hash
from maji.models.enums import UserRole
from maji.models.user import User
from maji.services.redis_service import RedisService

logger = logging.getLogger(__name__)

# Sierra Leone formats: +23276123456, 23276123456, 076123456, 76123456
PHONE_PATTERNS = [
    re.compile(r"^\+232\d{8}$"),
    re.compile(r"^232\d{8}$"),
    re.compile(r"^0\d{8}$"),
    re.compile(r"^\d{8}$"),
]


def validate_phone(phone: str) -> bool:
    cleaned = re.sub(r"[^\d+]", "", phone)
    return any(pattern.match(cleaned) for pattern in PHONE_PATTERNS)


def normalize_phone(phone: str) -> str:
    """Normalize a Sierra Leone phone number to +232XXXXXXXX.

    Raises:
        InvalidPhone: Number matches none of the accepted formats
    """
    if not validate_phone(phone):
        raise InvalidPhone()
    digits = re.sub(r"\D", "", phone)
    return "+232" + digits[-8:]


def generate_otp(length: int | None = None) -> str:
    length = length or settings.OTP_LENGTH
    return "".join(str(secrets.randbelow(10)) for _ in range(length))


class AuthService:
    """Service class for OTP authentication."""

    def __init__(self, db: AsyncSession, redis_service: RedisService):
        self.db = db
        self.redis_service = redis_service

    async def request_otp(self, phone: str) -> int:
        """Generate and store an OTP for a phone number.

        Any previous code for the phone is replaced.

        Args:
            phone: Phone number in any accepted format

        Returns:
            Seconds until the code expires
        """
        normalized = normalize_phone(phone)
        code = generate_otp()

        await self.redis_service.store_otp(
            normalized, hash_otp(normalized, code), settings.OTP_EXPIRE_SECONDS
        )

        if settings.DEBUG:
            logger.info(f"[DEV] OTP for {normalized}: {code}")
        else:
            logger.info(f"OTP issued for {normalized}")

        return settings.OTP_EXPIRE_SECONDS

    async def verify_otp(self, phone: str, code: str) -> tuple[User, str, bool]:
        """Verify an OTP and log the user in, creating the account if needed.

        Args:
            phone: Phone number in any accepted format
            code: OTP code entered by the user

        Returns:
            Tuple of (user, access_token, is_new_user)

        Raises:
            OtpExpired: No code stored for the phone
            OtpMaxAttempts: Too many failed attempts
            InvalidOtp: Code does not match
        """
        normalized = normalize_phone(phone)

        stored = await self.redis_service.get_otp(normalized)
        if stored is None:
            raise OtpExpired()

        attempts = await self.redis_service.get_otp_attempts(normalized)
        if attempts >= settings.OTP_MAX_ATTEMPTS:
            await self.redis_service.delete_otp(normalized)
            raise OtpMaxAttempts()

        if not verify_otp_hash(normalized, code, stored):
            await self.redis_service.increment_otp_attempts(normalized)
            raise InvalidOtp()

        await self.redis_service.delete_otp(normalized)

        user, is_new_user = await self._get_or_create_user(normalized)
        if not user.is_active:
            raise Forbidden("User account is not active")

        token = create_access_token({"sub": str(user.user_id), "role": user.role.value})
        logger.info(f"User {user.user_id} logged in (new={is_new_user})")
        return user, token, is_new_user

    async def _get_or_create_user(self, phone: str) -> tuple[User, bool]:
        result = await self.db.execute(select(User).where(User.phone == phone))
        user = result.scalar_one_or_none()
        if user is not None:
            return user, False

        user = User(phone=phone, role=UserRole.CITIZEN)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Concurrent first login for the same phone
            await self.db.rollback()
            result = await self.db.execute(select(User).where(User.phone == phone))
            return result.scalar_one(), False
        return user, True
