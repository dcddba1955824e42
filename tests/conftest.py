"""
Shared fixtures for django-blog-store tests.
"""
from datetime import timedelta

import pytest
from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils import timezone

from blog_store import services
from blog_store.models import Post, ReadyStatus

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture(autouse=True)
def clear_cache():
    """Cached facets must not leak between tests."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def image():
    """A small uploaded PNG."""
    return SimpleUploadedFile("cover.png", PNG_BYTES, content_type="image/png")


@pytest.fixture
def blog(db):
    """Create a test blog."""
    return services.create_blog(
        name="Rust Notes",
        description="Systems programming notes",
        owner="alice",
    )


@pytest.fixture
def post(db, blog):
    """Create a draft post in the test blog."""
    return services.create_post(
        blog.pk,
        title="Ownership Explained",
        abstract="A short tour of ownership",
        content="Every value has a single owner.",
        author="alice",
        tags=["rust", "memory"],
    )


@pytest.fixture
def make_post(db):
    """
    Factory for production-ready posts with a controlled creation time.

    ``age`` is how far in the past the post was created.
    """

    def _make_post(blog, title, age=timedelta(0), tags=(), status=ReadyStatus.PRODUCTION_READY):
        created = services.create_post(
            blog.pk,
            title=title,
            abstract=f"About {title}",
            content=f"Body of {title}",
            author="alice",
            ready_status=status,
            tags=tags,
        )
        Post.objects.filter(pk=created.pk).update(created=timezone.now() - age)
        return Post.objects.get(pk=created.pk)

    return _make_post
