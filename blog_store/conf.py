"""
Configuration settings for django-blog-store.

Override these in your Django settings.py:

    BLOG_STORE = {
        'POSTS_PER_PAGE': 5,
        'ATTACHMENT_MAX_SIZE': 2 * 1024 * 1024,
        'INDEX_CACHE_ALIAS': 'default',
        ...
    }
"""
from django.conf import settings

DEFAULTS = {
    # Listings
    "POSTS_PER_PAGE": 5,
    "DISTINCT_TAGS_LIMIT": 15,

    # Attachments, in bytes. None disables the cap.
    "ATTACHMENT_MAX_SIZE": 5 * 1024 * 1024,

    # Category/tag index cache
    "INDEX_CACHE_ALIAS": "default",
    "INDEX_CACHE_TIMEOUT": 300,

    # SEO
    "SLUG_MAX_LENGTH": 100,
}


class BlogStoreSettings:
    """
    Lazy settings object that reads from Django settings.

    Access via: from blog_store.conf import blog_settings
    """

    def __getattr__(self, name):
        if name not in DEFAULTS:
            raise AttributeError(f"Invalid blog_store setting: {name}")

        user_settings = getattr(settings, "BLOG_STORE", {})
        return user_settings.get(name, DEFAULTS[name])


blog_settings = BlogStoreSettings()
