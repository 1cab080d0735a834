"""
Caching for derived motorcycle lookups (distinct makes, covered years).

Backed by whatever CACHES configures: django-redis when REDIS_URL is set,
local memory otherwise. Live commerce data never goes through here.
"""
from contextlib import contextmanager
from functools import wraps
import hashlib
import logging
import threading

from django.core.cache import cache

logger = logging.getLogger(__name__)

MOTORCYCLE_LOOKUP_CACHE_TTL = 600  # seconds

_signal_state = threading.local()


def lookup_cache_key(prefix, *args, **kwargs):
    if not args and not kwargs:
        return f"fitment:{prefix}"
    digest = hashlib.md5(f"{args}:{sorted(kwargs.items())}".encode()).hexdigest()
    return f"fitment:{prefix}:{digest}"


def cached_lookup(key_prefix, timeout=MOTORCYCLE_LOOKUP_CACHE_TTL):
    """
    Cache a lookup function's result under `key_prefix`.

    The wrapped function gains an ``invalidate(*args, **kwargs)`` attribute
    that drops the entry for the same arguments.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            key = lookup_cache_key(key_prefix, *args, **kwargs)
            value = cache.get(key)
            if value is not None:
                logger.debug(f"Lookup cache hit: {key}")
                return value
            value = func(*args, **kwargs)
            cache.set(key, value, timeout)
            return value

        def invalidate(*args, **kwargs):
            cache.delete(lookup_cache_key(key_prefix, *args, **kwargs))

        wrapper.invalidate = invalidate
        return wrapper
    return decorator


@contextmanager
def suspend_cache_signals():
    """Skip per-row invalidation inside the block (bulk imports invalidate once afterwards)"""
    previous = getattr(_signal_state, 'suspended', False)
    _signal_state.suspended = True
    try:
        yield
    finally:
        _signal_state.suspended = previous


def is_suspended():
    return getattr(_signal_state, 'suspended', False)
