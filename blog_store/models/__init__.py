"""
Models for django-blog-store.

All models are importable from blog_store.models:

    from blog_store.models import Blog, Post, Tag, ReadyStatus
"""
from .posts import ReadyStatus, Post, Tag
from .blogs import Blog

__all__ = [
    "Blog",
    "Post",
    "Tag",
    "ReadyStatus",
]
