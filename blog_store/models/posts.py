"""
Post and Tag models for django-blog-store.
"""
from django.core.validators import MinLengthValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.text import slugify

from ..conf import blog_settings


class ReadyStatus(models.TextChoices):
    """Editorial readiness of a post. Only PRODUCTION_READY posts are listed publicly."""

    DRAFT = "draft", "Draft"
    SUBMITTED = "submitted", "Submitted"
    PREPRODUCTION = "preproduction", "Preproduction"
    PRODUCTION_READY = "production_ready", "Production Ready"


class PostQuerySet(models.QuerySet):
    """Filters used by the listing functions."""

    def production_ready(self):
        return self.filter(ready_status=ReadyStatus.PRODUCTION_READY)

    def in_category(self, category_name):
        return self.filter(blog__name__iexact=category_name)

    def tagged(self, text):
        return self.filter(tags__text__iexact=text).distinct()

    def matching(self, term):
        return self.filter(
            Q(title__icontains=term)
            | Q(abstract__icontains=term)
            | Q(content__icontains=term)
            | Q(tags__text__icontains=term)
        ).distinct()

    def newest_first(self):
        return self.order_by("-created", "-id")


class Post(models.Model):
    """
    Article belonging to exactly one blog.

    Supports:
    - Readiness workflow (draft through production ready)
    - Ordered free-form tags
    - Inline image attachment
    - Optimistic concurrency via ``version``
    """

    blog = models.ForeignKey(
        "blog_store.Blog",
        on_delete=models.CASCADE,
        related_name="posts",
    )

    # Content
    title = models.CharField(max_length=75, validators=[MinLengthValidator(2)])
    abstract = models.CharField(max_length=200, validators=[MinLengthValidator(2)])
    content = models.TextField()
    slug = models.SlugField(max_length=255, unique=True)

    # Opaque identity supplied by the authentication layer
    author = models.CharField(
        max_length=450,
        help_text="Identity of the user who created or last edited the post",
    )

    ready_status = models.CharField(
        max_length=20,
        choices=ReadyStatus.choices,
        default=ReadyStatus.DRAFT,
        db_index=True,
    )

    # Inline image attachment
    image_data = models.BinaryField(null=True, blank=True)
    content_type = models.CharField(max_length=100, blank=True)

    version = models.PositiveIntegerField(default=1, editable=False)

    # Timestamps
    created = models.DateTimeField(default=timezone.now, editable=False, db_index=True)
    updated = models.DateTimeField(null=True, blank=True, editable=False)

    objects = PostQuerySet.as_manager()

    class Meta:
        ordering = ["-created", "-id"]
        indexes = [
            models.Index(fields=["ready_status", "-created"]),
        ]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        # Auto-generate slug from title
        if not self.slug and self.title:
            self.slug = Post.unique_slug(self.title, exclude_pk=self.pk)
        super().save(*args, **kwargs)

    @classmethod
    def unique_slug(cls, title, exclude_pk=None):
        """
        Derive a slug from ``title`` that no other post uses.

        Collisions get a numeric suffix: ``my-title``, ``my-title-1``, ...
        Returns an empty string when the title has no slug-safe characters.
        """
        base_slug = slugify(title)[:blog_settings.SLUG_MAX_LENGTH]
        if not base_slug:
            return ""
        slug = base_slug
        counter = 1
        while cls.objects.filter(slug=slug).exclude(pk=exclude_pk).exists():
            slug = f"{base_slug}-{counter}"
            counter += 1
        return slug

    @property
    def tag_list(self):
        """Tag texts in the order the author gave them."""
        return [tag.text for tag in self.tags.all()]

    @property
    def is_published(self):
        return self.ready_status == ReadyStatus.PRODUCTION_READY

    @property
    def has_image(self):
        return bool(self.image_data)


class Tag(models.Model):
    """
    Free-form tag on a single post.

    Tags are stored per post so that repeated tags count towards
    their frequency in the tag index.
    """

    post = models.ForeignKey(
        Post,
        on_delete=models.CASCADE,
        related_name="tags",
    )
    text = models.CharField(max_length=50)
    position = models.PositiveSmallIntegerField(default=0)

    class Meta:
        ordering = ["position", "id"]

    def __str__(self):
        return self.text
