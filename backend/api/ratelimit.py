"""Rate limiting configuration for API endpoints"""
from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from typing import Optional

from api.config import settings


def default_limit(request: Optional[Request] = None) -> str:
    """
    Rate limit string for an endpoint.

    SlowAPI calls this with no arguments during decorator initialization,
    then with the actual Request during request handling.
    """
    return settings.DEFAULT_RATE_LIMIT


def get_rate_limit_key(request: Optional[Request] = None) -> str:
    """Per-browser key: the identity cookie when present, else the client address"""
    if request is None:
        return "default"
    from stockcal.config import settings as core_settings

    user_id = request.cookies.get(core_settings.user_cookie_name)
    return user_id or get_remote_address(request)


limiter = Limiter(key_func=get_rate_limit_key)
