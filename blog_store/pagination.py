"""
Paginated post listings.

Only production-ready posts are listed, newest first. Page size comes
from the POSTS_PER_PAGE setting; callers only choose the page number.
"""
from dataclasses import dataclass, field

from django.core.paginator import EmptyPage, Paginator
from django.db import DatabaseError

from .conf import blog_settings
from .exceptions import ListingUnavailable, NotFound, ValidationError
from .models import Blog, Post


@dataclass
class PostPage:
    """One page of a post listing."""

    number: int
    page_size: int
    total_count: int
    page_count: int
    items: list = field(default_factory=list)

    @property
    def has_previous(self):
        return self.number > 1

    @property
    def has_next(self):
        return self.number < self.page_count

    def __iter__(self):
        return iter(self.items)

    def __len__(self):
        return len(self.items)


def page_number(page):
    """
    Normalize a requested page number.

    Missing values mean the first page; anything below 1 is clamped to 1.
    """
    if page is None or page == "":
        return 1
    try:
        number = int(page)
    except (TypeError, ValueError):
        raise ValidationError({"page": [f"{page!r} is not a page number."]}) from None
    return max(number, 1)


def paginate(queryset, page=None):
    """Slice ``queryset`` into a PostPage."""
    number = page_number(page)
    page_size = blog_settings.POSTS_PER_PAGE
    try:
        paginator = Paginator(queryset, page_size)
        total_count = paginator.count
        page_count = paginator.num_pages if total_count else 0
        try:
            items = list(paginator.page(number).object_list)
        except EmptyPage:
            items = []
    except DatabaseError as exc:
        raise ListingUnavailable(f"Post listing failed: {exc}") from exc

    return PostPage(
        number=number,
        page_size=page_size,
        total_count=total_count,
        page_count=page_count,
        items=items,
    )


def _listed_posts():
    return Post.objects.production_ready().select_related("blog").newest_first()


def paged_posts_by_category(category_name, page=None):
    """
    Production-ready posts of the blog named ``category_name``, ignoring case.

    An unknown category gives an empty page.
    """
    return paginate(_listed_posts().in_category(category_name), page)


def paged_posts_by_tag(tag, page=None):
    """
    Production-ready posts carrying ``tag``, ignoring case.

    A blank tag matches nothing and gives an empty page.
    """
    tag = (tag or "").strip()
    if not tag:
        return paginate(Post.objects.none(), page)
    return paginate(_listed_posts().tagged(tag), page)


def paged_blog_posts(blog_id, page=None):
    """
    Production-ready posts of blog ``blog_id``.

    Raises:
        NotFound: the blog does not exist
    """
    try:
        exists = Blog.objects.filter(pk=blog_id).exists()
    except (TypeError, ValueError):
        exists = False
    except DatabaseError as exc:
        raise ListingUnavailable(f"Post listing failed: {exc}") from exc
    if not exists:
        raise NotFound(f"Blog {blog_id} does not exist")
    return paginate(_listed_posts().filter(blog_id=blog_id), page)


def search_posts(term, page=None):
    """Production-ready posts whose text or tags contain ``term``."""
    posts = _listed_posts()
    term = (term or "").strip()
    if term:
        posts = posts.matching(term)
    return paginate(posts, page)
