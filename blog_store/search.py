"""
Category and tag facets for browsing.

Both facets are computed from the current post rows and cached. Cached
values are keyed by a generation token; ``invalidate()`` replaces the
token so every facet is recomputed on next access.
"""
import uuid

from django.core.cache import caches
from django.db.models import Count, Min
from django.db.models.functions import Lower

from .conf import blog_settings
from .exceptions import ValidationError
from .models import Blog, Tag

GENERATION_KEY = "blog_store:index:generation"


def _cache():
    return caches[blog_settings.INDEX_CACHE_ALIAS]


def _generation():
    cache = _cache()
    generation = cache.get(GENERATION_KEY)
    if generation is None:
        generation = uuid.uuid4().hex
        cache.set(GENERATION_KEY, generation, timeout=None)
    return generation


def _cached(key, compute):
    cache = _cache()
    versioned_key = f"blog_store:index:{_generation()}:{key}"
    value = cache.get(versioned_key)
    if value is None:
        value = compute()
        cache.set(versioned_key, value, timeout=blog_settings.INDEX_CACHE_TIMEOUT)
    return value


def invalidate():
    """Drop every cached facet."""
    _cache().set(GENERATION_KEY, uuid.uuid4().hex, timeout=None)


def distinct_categories():
    """
    Return names of blogs that have at least one production-ready post.

    Names are compared case-insensitively and returned as stored,
    sorted alphabetically ignoring case.
    """
    return _cached("categories", _compute_categories)


def _compute_categories():
    names = (
        Blog.objects.with_published_posts()
        .order_by(Lower("name"), "id")
        .values_list("name", flat=True)
    )
    seen = set()
    categories = []
    for name in names:
        folded = name.casefold()
        if folded not in seen:
            seen.add(folded)
            categories.append(name)
    return categories


def distinct_tags(limit=None):
    """
    Return the ``limit`` most used tags across all posts.

    Ties are broken by which tag was used first.

    Raises:
        ValidationError: ``limit`` is not a positive integer
    """
    if limit is None:
        limit = blog_settings.DISTINCT_TAGS_LIMIT
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValidationError({"limit": ["Must be a positive integer."]})
    return _cached(f"tags:{limit}", lambda: _compute_tags(limit))


def _compute_tags(limit):
    rows = (
        Tag.objects.values("text")
        .annotate(uses=Count("id"), first_seen=Min("id"))
        .order_by("-uses", "first_seen")[:limit]
    )
    return [row["text"] for row in rows]
