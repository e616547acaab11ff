# /shopstream/utils/rate_limiter.py

from slowapi import Limiter
from shopstream.utils.request_utils import get_remote_address
from shopstream.config.settings import settings

# Single limiter instance shared by the app and any router that needs a
# route-specific limit.

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit_per_minute}/minute"]
)
