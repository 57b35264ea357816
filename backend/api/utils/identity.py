"""Anonymous per-browser identity cookie"""
import secrets
import string
import time

from fastapi import Request

from stockcal.config import settings

_BASE36 = string.digits + string.ascii_lowercase


def _base36(n: int) -> str:
    digits = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits)) or "0"


def new_user_id() -> str:
    """user_{random base36}_{epoch ms}"""
    return f"user_{_base36(secrets.randbits(52))}_{int(time.time() * 1000)}"


async def identity_cookie_middleware(request: Request, call_next):
    """Issue the identity cookie on responses to requests that lack one"""
    response = await call_next(request)
    if not request.cookies.get(settings.user_cookie_name):
        response.set_cookie(
            key=settings.user_cookie_name,
            value=new_user_id(),
            max_age=settings.user_cookie_max_age,
            path="/",
            samesite="lax",
            secure=settings.is_production,
        )
    return response
