# app/core/rate_limiter.py

from slowapi import Limiter
from slowapi.util import get_remote_address
from ..core.config import settings

# Stand-in for limiter.limit when rate limiting is disabled.
def no_op_decorator(*args, **kwargs):
    def decorator(func):
        return func
    return decorator

if settings.RATE_LIMITING_ENABLED:
    # Clients are identified by remote IP address.
    limiter = Limiter(
        key_func=get_remote_address,
        storage_uri=settings.REDIS_URL
    )
    limiter_decorator = limiter.limit
else:
    limiter = None
    limiter_decorator = no_op_decorator
