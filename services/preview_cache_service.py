"""
Temporary storage for upload previews.
Keeps parsed price-list rows in memory until the operator confirms or the
TTL runs out. Single process only.
"""
import threading
import uuid
from datetime import datetime, timedelta
from typing import Any, Optional

from config import settings

_cache: dict[str, tuple[datetime, Any]] = {}
_lock = threading.Lock()


def store_preview(data: Any, ttl_minutes: Optional[int] = None) -> str:
    """Store parsed rows, return preview_id."""
    preview_id = str(uuid.uuid4())
    ttl = ttl_minutes or settings.preview_ttl_minutes
    expires_at = datetime.now() + timedelta(minutes=ttl)
    with _lock:
        _cache[preview_id] = (expires_at, data)
        _cleanup_expired()
    return preview_id


def retrieve_preview(preview_id: str) -> Optional[Any]:
    """Data for preview_id, or None if expired/not found."""
    with _lock:
        entry = _cache.get(preview_id)
        if entry is None:
            return None
        expires_at, data = entry
        if datetime.now() > expires_at:
            del _cache[preview_id]
            return None
        return data


def delete_preview(preview_id: str) -> bool:
    """Remove preview after confirm or cancel. True if it existed."""
    with _lock:
        return _cache.pop(preview_id, None) is not None


def clear_previews() -> None:
    with _lock:
        _cache.clear()


def _cleanup_expired() -> None:
    """Remove all expired entries. Caller holds _lock."""
    now = datetime.now()
    expired = [k for k, (exp, _) in _cache.items() if now > exp]
    for k in expired:
        del _cache[k]
