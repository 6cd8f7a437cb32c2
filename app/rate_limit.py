from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import settings

# Per-client (remote address) limits; each route declares its own budget
# with ``@limiter.limit(...)`` and must accept a ``request`` argument.
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    enabled=settings.RATE_LIMIT_ENABLED,
)
