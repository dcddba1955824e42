"""
Content store operations for blogs and posts.

These functions are the only supported way to write blog content. Every
write takes the acting identity explicitly and every edit is checked
against the version the caller loaded:

    blog = services.get_blog(blog_id)
    ...
    services.update_blog(
        blog.pk,
        version=blog.version,
        name=form["name"],
        description=form["description"],
        editor=request.user.get_username(),
        new_image=request.FILES.get("image"),
    )

An edit based on a stale version raises ConcurrencyConflict; the caller
reloads and retries or gives up.
"""
import logging
from contextlib import contextmanager

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from . import search
from .attachments import encode_image
from .exceptions import (
    BlogStoreError,
    ConcurrencyConflict,
    NotFound,
    StorageError,
    ValidationError,
)
from .models import Blog, Post, ReadyStatus, Tag

logger = logging.getLogger(__name__)


@contextmanager
def _storage_errors(action):
    """Re-raise database faults as StorageError."""
    try:
        yield
    except BlogStoreError:
        raise
    except IntegrityError as exc:
        raise ValidationError({"__all__": [f"{action} conflicts with existing data."]}) from exc
    except DatabaseError as exc:
        logger.exception("%s failed", action)
        raise StorageError(f"{action} failed: {exc}") from exc


def _clean(instance):
    try:
        instance.full_clean()
    except DjangoValidationError as exc:
        raise ValidationError.from_django(exc) from exc


def _require_identity(field, value):
    if not value or not str(value).strip():
        raise ValidationError({field: ["A caller identity is required."]})


def _first(queryset, **lookup):
    """First match for ``lookup``; malformed ids count as no match."""
    try:
        return queryset.filter(**lookup).first()
    except (TypeError, ValueError):
        return None


def _clean_tags(tags):
    if isinstance(tags, str):
        raise ValidationError({"tags": ["Tags must be a list of strings."]})
    cleaned = []
    for text in tags:
        text = (text or "").strip()
        if not text:
            raise ValidationError({"tags": ["Tags cannot be empty."]})
        if len(text) > Tag._meta.get_field("text").max_length:
            raise ValidationError({"tags": [f"Tag {text[:20]!r}... is too long."]})
        cleaned.append(text)
    return cleaned


def _check_status(ready_status):
    if ready_status not in ReadyStatus.values:
        raise ValidationError({"ready_status": [f"Unknown status {ready_status!r}."]})
    return ReadyStatus(ready_status)


def _compare_and_swap(queryset, pk, version, fields):
    """
    Apply ``fields`` to row ``pk`` only if it is still at ``version``.

    Raises NotFound if the row has gone, ConcurrencyConflict if it moved on.
    """
    model = queryset.model
    matched = queryset.filter(pk=pk, version=version).update(
        version=F("version") + 1,
        **fields,
    )
    if matched:
        return
    if not queryset.filter(pk=pk).exists():
        raise NotFound(f"{model.__name__} {pk} does not exist")
    logger.warning("Concurrency conflict on %s %s at version %s", model.__name__, pk, version)
    raise ConcurrencyConflict(model.__name__, pk, version)


def create_blog(*, name, description, owner, image=None):
    """
    Create a blog owned by ``owner``.

    Raises:
        ValidationError: missing or invalid name/description, duplicate name
        AttachmentReadError: the image could not be read
    """
    _require_identity("owner", owner)
    image_data, image_type = encode_image(image)

    blog = Blog(
        name=(name or "").strip(),
        description=(description or "").strip(),
        owner=owner,
        image_data=image_data,
        content_type=image_type,
        created=timezone.now(),
    )
    with _storage_errors("Creating blog"):
        _clean(blog)
        blog.save()

    search.invalidate()
    logger.info("Blog %s (%r) created by %s", blog.pk, blog.name, owner)
    return blog


def get_blog(blog_id):
    with _storage_errors("Loading blog"):
        blog = _first(Blog.objects.all(), pk=blog_id)
    if blog is None:
        raise NotFound(f"Blog {blog_id} does not exist")
    return blog


def get_blog_by_name(name):
    """Look a blog up by name, ignoring case."""
    with _storage_errors("Loading blog"):
        blog = Blog.objects.named(name).first()
    if blog is None:
        raise NotFound(f"No blog named {name!r}")
    return blog


def list_blogs():
    with _storage_errors("Listing blogs"):
        return list(Blog.objects.order_by("name"))


def update_blog(blog_id, *, version, name, description, editor, new_image=None):
    """
    Edit a blog the caller loaded at ``version``.

    ``created`` is never touched. When ``new_image`` is None the stored
    image and its content type are kept as they are.

    Raises:
        NotFound: the blog does not exist
        ConcurrencyConflict: the blog changed since ``version``
        ValidationError: invalid fields or duplicate name
    """
    _require_identity("editor", editor)
    image_data, image_type = encode_image(new_image)

    with _storage_errors("Updating blog"), transaction.atomic():
        blog = get_blog(blog_id)
        if blog.version != version:
            logger.warning("Stale edit of blog %s: version %s, stored %s", blog_id, version, blog.version)
            raise ConcurrencyConflict("Blog", blog_id, version)

        blog.name = (name or "").strip()
        blog.description = (description or "").strip()
        blog.owner = editor
        blog.updated = timezone.now()
        if new_image is not None:
            blog.image_data = image_data
            blog.content_type = image_type
        _clean(blog)

        _compare_and_swap(
            Blog.objects.all(),
            blog_id,
            version,
            {
                "name": blog.name,
                "description": blog.description,
                "owner": blog.owner,
                "updated": blog.updated,
                "image_data": blog.image_data,
                "content_type": blog.content_type,
            },
        )
        blog = Blog.objects.get(pk=blog_id)

    search.invalidate()
    logger.info("Blog %s updated by %s (version %s)", blog_id, editor, blog.version)
    return blog


def delete_blog(blog_id):
    """
    Delete a blog together with its posts.

    Returns the number of posts that were removed with it.
    """
    with _storage_errors("Deleting blog"), transaction.atomic():
        blog = get_blog(blog_id)
        post_count = blog.posts.count()
        blog.delete()

    search.invalidate()
    logger.info("Blog %s deleted with %d posts", blog_id, post_count)
    return post_count


def _replace_tags(post, tags):
    post.tags.all().delete()
    Tag.objects.bulk_create(
        [Tag(post=post, text=text, position=index) for index, text in enumerate(tags)]
    )


def create_post(
    blog_id,
    *,
    title,
    abstract,
    content,
    author,
    ready_status=ReadyStatus.DRAFT,
    tags=(),
    image=None,
):
    """
    Create a post in blog ``blog_id``.

    The slug is derived from the title and made unique.

    Raises:
        NotFound: the blog does not exist
        ValidationError: invalid fields, unknown status or empty tag
    """
    _require_identity("author", author)
    status = _check_status(ready_status)
    tags = _clean_tags(tags)
    image_data, image_type = encode_image(image)

    with _storage_errors("Creating post"), transaction.atomic():
        blog = get_blog(blog_id)
        title = (title or "").strip()
        post = Post(
            blog=blog,
            title=title,
            abstract=(abstract or "").strip(),
            content=content or "",
            slug=Post.unique_slug(title),
            author=author,
            ready_status=status,
            image_data=image_data,
            content_type=image_type,
            created=timezone.now(),
        )
        if title and not post.slug:
            raise ValidationError({"title": ["Title must contain letters or digits."]})
        _clean(post)
        post.save()
        _replace_tags(post, tags)

    search.invalidate()
    logger.info("Post %s (%s) created in blog %s by %s", post.pk, post.slug, blog_id, author)
    return post


def get_post(blog_id, post_id):
    """Return post ``post_id``, which must belong to blog ``blog_id``."""
    with _storage_errors("Loading post"):
        post = _first(Post.objects.select_related("blog"), pk=post_id, blog_id=blog_id)
    if post is None:
        raise NotFound(f"Post {post_id} does not exist in blog {blog_id}")
    return post


def get_post_by_slug(slug):
    with _storage_errors("Loading post"):
        post = Post.objects.select_related("blog").filter(slug=slug).first()
    if post is None:
        raise NotFound(f"No post with slug {slug!r}")
    return post


def update_post(
    blog_id,
    post_id,
    *,
    version,
    title,
    abstract,
    content,
    ready_status,
    editor,
    tags=None,
    new_image=None,
):
    """
    Edit a post the caller loaded at ``version``.

    The post stays in its blog. ``tags=None`` keeps the stored tags, a
    list replaces them. The slug follows the title when the title changes.

    Raises:
        NotFound: the post does not exist in this blog
        ConcurrencyConflict: the post changed since ``version``
        ValidationError: invalid fields, unknown status or empty tag
    """
    _require_identity("editor", editor)
    status = _check_status(ready_status)
    if tags is not None:
        tags = _clean_tags(tags)
    image_data, image_type = encode_image(new_image)

    with _storage_errors("Updating post"), transaction.atomic():
        post = get_post(blog_id, post_id)
        if post.version != version:
            logger.warning("Stale edit of post %s: version %s, stored %s", post_id, version, post.version)
            raise ConcurrencyConflict("Post", post_id, version)

        title = (title or "").strip()
        if title != post.title:
            post.slug = Post.unique_slug(title, exclude_pk=post.pk)
            if title and not post.slug:
                raise ValidationError({"title": ["Title must contain letters or digits."]})
        post.title = title
        post.abstract = (abstract or "").strip()
        post.content = content or ""
        post.ready_status = status
        post.author = editor
        post.updated = timezone.now()
        if new_image is not None:
            post.image_data = image_data
            post.content_type = image_type
        _clean(post)

        _compare_and_swap(
            Post.objects.filter(blog_id=blog_id),
            post_id,
            version,
            {
                "title": post.title,
                "abstract": post.abstract,
                "content": post.content,
                "slug": post.slug,
                "ready_status": post.ready_status,
                "author": post.author,
                "updated": post.updated,
                "image_data": post.image_data,
                "content_type": post.content_type,
            },
        )
        if tags is not None:
            _replace_tags(post, tags)
        post = Post.objects.select_related("blog").get(pk=post_id)

    search.invalidate()
    logger.info("Post %s updated by %s (version %s)", post_id, editor, post.version)
    return post


def delete_post(blog_id, post_id):
    with _storage_errors("Deleting post"), transaction.atomic():
        post = get_post(blog_id, post_id)
        post.delete()

    search.invalidate()
    logger.info("Post %s deleted from blog %s", post_id, blog_id)
