"""
Caching utilities for expensive queries.

Cached results are keyed on a per-topic generation number. Writing to a
watched table bumps the generation of every topic it feeds (see
``retailpos.core.realtime``), so stale entries simply stop being addressed.
This works the same on Redis and on the local memory backend, no key
scanning needed.
"""
from django.core.cache import cache
from functools import wraps
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
DASHBOARD_KPI_CACHE_TTL = 300  # 5 minutes
LOW_STOCK_CACHE_TTL = 180  # 3 minutes
REPORTS_CACHE_TTL = 600  # 10 minutes

GENERATION_KEY_PREFIX = 'realtime:generation'


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def _generation_key(topic):
    return f"{GENERATION_KEY_PREFIX}:{topic}"


def get_generation(topic):
    """Current generation of a topic, starting at 1"""
    key = _generation_key(topic)
    value = cache.get(key)
    if value is None:
        cache.add(key, 1, None)
        value = cache.get(key) or 1
    return value


def get_generations(topics):
    return {topic: get_generation(topic) for topic in topics}


def bump_generation(topic):
    """Advance a topic's generation, orphaning everything cached under it"""
    key = _generation_key(topic)
    try:
        return cache.incr(key)
    except ValueError:
        # Key missing or evicted: start past the implicit first generation
        cache.set(key, 2, None)
        return 2


def cached_query(cache_ttl=60, key_prefix="query", topics=()):
    """
    Decorator to cache expensive queries

    Usage:
        @cached_query(cache_ttl=120, key_prefix="dashboard", topics=("sales",))
        def get_expensive_data(department_id):
            # expensive query here
            return data
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            generations = tuple(get_generation(topic) for topic in topics)
            cache_key = make_cache_key(key_prefix, generations, *args, **kwargs)

            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {key_prefix}: {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {key_prefix}: {cache_key}")
            result = func(*args, **kwargs)
            cache.set(cache_key, result, cache_ttl)
            return result
        wrapper.uncached = func
        return wrapper
    return decorator
