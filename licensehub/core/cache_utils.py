"""
Tag-versioned caching for list and dropdown queries.

Each cache tag owns a version counter. Cached values are stored under a key
that embeds the tag's current version, so ``revalidate_tag`` only has to bump
the counter and every older entry becomes unreachable. This works the same on
Redis (django-redis) and on the local-memory backend used in development.
"""
from django.conf import settings
from django.core.cache import cache
from django.db import transaction
from functools import partial, wraps
import hashlib
import logging

logger = logging.getLogger(__name__)

USER_MANAGEMENT_TAG = 'user-management-table'
LICENSE_MANAGEMENT_TAG = 'license-management-table'
LICENSE_DROPDOWNS_TAG = 'license-dropdowns'
MANAGERS_TAG = 'user-managers'


def notifications_tag(user_id):
    return f"notifications:{user_id}"


def _version_key(tag):
    return f"tag-version:{tag}"


def get_tag_version(tag):
    version = cache.get(_version_key(tag))
    if version is None:
        version = 1
        cache.add(_version_key(tag), version, None)
    return version


def make_cache_key(tag, *args, **kwargs):
    """Generate a cache key bound to the tag's current version"""
    key_data = f"{tag}:{args}:{sorted(kwargs.items())}"
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{tag}:v{get_tag_version(tag)}:{key_hash}"


def cached_query(tag, cache_ttl=None):
    """
    Decorator to cache query results under ``tag``

    Usage:
        @cached_query(LICENSE_DROPDOWNS_TAG)
        def license_dropdowns():
            return [...]
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            ttl = cache_ttl if cache_ttl is not None else settings.LICENSEHUB['CACHE_TTL']
            cache_key = make_cache_key(tag, func.__name__, *args, **kwargs)

            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {tag}: {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {tag}: {cache_key}")
            result = func(*args, **kwargs)
            cache.set(cache_key, result, ttl)
            return result
        return wrapper
    return decorator


def revalidate_tag(tag):
    """
    Invalidate everything cached under ``tag``.

    Fire-and-forget: a cache failure is logged and never propagates to the
    mutation that asked for it.
    """
    try:
        key = _version_key(tag)
        if not cache.add(key, 2, None):
            cache.incr(key)
        logger.debug(f"Revalidated cache tag: {tag}")
    except Exception as e:
        logger.warning(f"Could not revalidate cache tag {tag}: {str(e)}")


def revalidate_tags(*tags):
    for tag in tags:
        revalidate_tag(tag)


def revalidate_tags_on_commit(*tags):
    """
    Revalidate ``tags`` once the current transaction commits.

    Bumping the version before commit lets a concurrent reader cache the
    pre-commit rows under the new version. Outside a transaction the
    revalidation runs immediately.
    """
    transaction.on_commit(partial(revalidate_tags, *tags))
