from maji.core.config import settings
from maji.core.database import Base, async_session_maker, engine, get_db
from maji.core.redis import close_redis, get_redis
from maji.core.security import create_access_token, decode_access_token

__all__ = [
    "settings",
    "Base",
    "engine",
    "async_session_maker",
    "get_db",
    "get_redis",
    "close_redis",
    "create_access_token",
    "decode_access_token",
]
