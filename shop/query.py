# shop/query.py
"""
Shared data-access helpers: retry with exponential backoff and a short-lived
read cache keyed by table + query.

The cache is an optimisation only. Every caller must get the same answer
with ``skip_cache=True`` (or with the dummy cache backend).
"""
import hashlib
import logging
import time
from urllib.error import URLError

from django.conf import settings
from django.core.cache import cache
from django.db import OperationalError
from pokemontcgsdk.restclient import PokemonTcgException

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
BASE_DELAY = 0.3          # seconds, doubled on every retry
DEFAULT_TTL = 5 * 60      # seconds

# the catalog SDK fetches through urllib: connection failures surface as URLError
RETRYABLE_ERRORS = (OperationalError, URLError, TimeoutError, PokemonTcgException)

_MISSING = object()


def execute_with_retry(fn, retries=MAX_RETRIES, base_delay=None):
    """Call ``fn()``; retry retryable errors with exponential backoff, then re-raise."""
    if base_delay is None:
        base_delay = getattr(settings, "QUERY_RETRY_BASE_DELAY", BASE_DELAY)
    attempt = 0
    while True:
        try:
            return fn()
        except RETRYABLE_ERRORS as exc:
            attempt += 1
            logger.warning("Query failed (attempt %s/%s): %s", attempt, retries, exc)
            if attempt >= retries:
                raise
            time.sleep(base_delay * (2 ** attempt))


def _generation_key(table):
    return f"querycache:{table}:generation"


def _generation(table):
    return cache.get_or_set(_generation_key(table), 0, None)


def cache_key(table, key):
    digest = hashlib.md5(str(key).encode("utf-8")).hexdigest()
    return f"querycache:{table}:{_generation(table)}:{digest}"


def cached_query(table, key, fn, ttl=None, skip_cache=False):
    """
    Return ``fn()`` (run through ``execute_with_retry``), caching the result
    for ``ttl`` seconds under ``table`` + ``key``. ``fn`` must return a
    picklable, fully evaluated value (a list, not a QuerySet).
    """
    if ttl is None:
        ttl = getattr(settings, "QUERY_CACHE_TTL", DEFAULT_TTL)
    if skip_cache or ttl <= 0:
        return execute_with_retry(fn)

    full_key = cache_key(table, key)
    cached = cache.get(full_key, _MISSING)
    if cached is not _MISSING:
        return cached

    data = execute_with_retry(fn)
    cache.set(full_key, data, ttl)
    return data


def invalidate(table):
    """Make every cached entry for ``table`` unreachable."""
    try:
        cache.incr(_generation_key(table))
    except ValueError:
        cache.set(_generation_key(table), 1, None)
