# raid_roster/utils/idempotency.py
import hashlib
import inspect
import logging
import os
import time
from dataclasses import dataclass
from functools import wraps
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from starlette.concurrency import run_in_threadpool

logger = logging.getLogger("raid_roster.idempotency")

IDEMPOTENCY_HEADER = "Idempotency-Key"

# Seconds a stored response stays replayable; 0 keeps entries for the process lifetime.
IDEMPOTENCY_TTL_SECONDS = int(os.getenv("IDEMPOTENCY_TTL_SECONDS", "86400"))

_clock = time.monotonic


@dataclass
class _StoredResponse:
    payload: Any
    stored_at: float

    def expired(self, now: float, ttl: int) -> bool:
        return ttl > 0 and now - self.stored_at >= ttl


# Per-process store. Replays are only guaranteed within one worker.
_idempotency_store: Dict[str, _StoredResponse] = {}


def clear_idempotency_cache() -> None:
    _idempotency_store.clear()


def _find_request(args, kwargs) -> Request:
    for a in (*args, *kwargs.values()):
        if isinstance(a, Request):
            return a
    raise HTTPException(status_code=500, detail="Request object not found")


def _client_key(request: Request, key_prefix: str) -> str:
    key = request.headers.get(IDEMPOTENCY_HEADER)
    if not key and os.getenv("TESTING", "0") == "1":
        key = f"test-{key_prefix}"
    if not key:
        raise HTTPException(status_code=400, detail=f"Missing {IDEMPOTENCY_HEADER} header")
    return key


async def _request_fingerprint(request: Request) -> str:
    """method|path|query|sha1(body). Starlette caches request.body()."""
    body_hash = hashlib.sha1(await request.body()).hexdigest()
    return f"{request.method.upper()}|{request.url.path}|{request.url.query}|{body_hash}"


def _lookup(cache_key: str) -> Optional[_StoredResponse]:
    entry = _idempotency_store.get(cache_key)
    if entry is not None and entry.expired(_clock(), IDEMPOTENCY_TTL_SECONDS):
        del _idempotency_store[cache_key]
        return None
    return entry


def with_idempotency(key_prefix: str):
    """
    Replay the stored response when a roster mutation is retried.

    Needs an 'Idempotency-Key' header (TESTING=1 supplies a fixed fallback).
    Entries are keyed by prefix, client key and request fingerprint, so one key
    reused for another event or query runs the handler again. Handlers that
    raise store nothing. Sync handlers run in the threadpool like any plain
    FastAPI endpoint, so blocking database work stays off the event loop.
    """

    def decorator(func):
        is_async = inspect.iscoroutinefunction(func)

        @wraps(func)
        async def wrapper(*args, **kwargs):
            request = _find_request(args, kwargs)
            client_key = _client_key(request, key_prefix)
            cache_key = f"{key_prefix}::{client_key}::{await _request_fingerprint(request)}"

            stored = _lookup(cache_key)
            if stored is not None:
                logger.info("idempotent replay key=%s path=%s", client_key, request.url.path)
                return stored.payload

            if is_async:
                payload = await func(*args, **kwargs)
            else:
                payload = await run_in_threadpool(func, *args, **kwargs)

            _idempotency_store[cache_key] = _StoredResponse(payload=payload, stored_at=_clock())
            return payload

        return wrapper

    return decorator
