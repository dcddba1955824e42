"""Django app configuration for blog_store."""
from django.apps import AppConfig


class BlogStoreConfig(AppConfig):
    """Configuration for the blog store app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "blog_store"
    verbose_name = "Blog Store"

    def ready(self):
        """Connect index invalidation signals."""
        from . import signals  # noqa: F401
