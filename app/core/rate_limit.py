"""Request rate limiting.

Every route gets the general per-client budget through ``SlowAPIMiddleware``;
admin login is decorated with the stricter credential limit instead.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings

AUTH_RATE_LIMIT = settings.auth_rate_limit
GENERAL_RATE_LIMIT = settings.general_rate_limit

limiter = Limiter(key_func=get_remote_address, default_limits=[GENERAL_RATE_LIMIT])
