"""
Blog model for django-blog-store.
"""
from django.core.validators import MinLengthValidator
from django.db import models
from django.db.models.functions import Lower
from django.utils import timezone

from .posts import ReadyStatus


class BlogQuerySet(models.QuerySet):
    def named(self, name):
        """Case-insensitive lookup by display name."""
        return self.filter(name__iexact=name)

    def with_published_posts(self):
        return self.filter(posts__ready_status=ReadyStatus.PRODUCTION_READY).distinct()


class Blog(models.Model):
    """
    A named content channel owning zero or more posts.

    The blog name doubles as the browsing category for its posts.
    """

    name = models.CharField(max_length=100, validators=[MinLengthValidator(2)])
    description = models.CharField(max_length=500, validators=[MinLengthValidator(2)])

    # Opaque identity supplied by the authentication layer
    owner = models.CharField(
        max_length=450,
        help_text="Identity of the user who created or last edited the blog",
    )

    # Inline image attachment
    image_data = models.BinaryField(null=True, blank=True)
    content_type = models.CharField(max_length=100, blank=True)

    # Optimistic concurrency token, bumped on every update
    version = models.PositiveIntegerField(default=1, editable=False)

    created = models.DateTimeField(default=timezone.now, editable=False, db_index=True)
    updated = models.DateTimeField(null=True, blank=True, editable=False)

    objects = BlogQuerySet.as_manager()

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                Lower("name"),
                name="blog_store_blog_name_ci_unique",
                violation_error_message="A blog with this name already exists.",
            ),
        ]

    def __str__(self):
        return self.name

    @property
    def has_image(self):
        return bool(self.image_data)
