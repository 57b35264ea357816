"""FastAPI dependencies"""
from functools import lru_cache
from typing import Generator, Optional

from fastapi import Request
from sqlalchemy.orm import Session

from api.utils.exceptions import UnauthorizedException
from stockcal.config import settings
from stockcal.db.session import SessionLocal
from stockcal.domain.placements import JsonFileKeyValueStore, KeyValueStore


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session; committed when the handler returns normally"""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@lru_cache
def _default_kv_store() -> JsonFileKeyValueStore:
    return JsonFileKeyValueStore(settings.kv_store_path)


def get_kv_store() -> KeyValueStore:
    """Key-value store for per-user client state (recent searches)"""
    return _default_kv_store()


def get_current_user_optional(request: Request) -> Optional[str]:
    """Opaque user id from the identity cookie, or None"""
    return request.cookies.get(settings.user_cookie_name) or None


def get_current_user_id(request: Request) -> str:
    """Opaque user id from the identity cookie; 401 when absent"""
    user_id = get_current_user_optional(request)
    if not user_id:
        raise UnauthorizedException()
    return user_id
