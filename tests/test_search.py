"""
Tests for the category and tag facets.
"""
import pytest

from blog_store import search, services
from blog_store.exceptions import ValidationError
from blog_store.models import Post, ReadyStatus


class TestDistinctCategories:
    def test_only_blogs_with_published_posts(self, db, blog, make_post):
        quiet = services.create_blog(name="Quiet", description="Drafts only", owner="bob")
        make_post(blog, "Live Post")
        make_post(quiet, "Draft Post", status=ReadyStatus.DRAFT)

        assert search.distinct_categories() == ["Rust Notes"]

    def test_alphabetical_in_stored_case(self, db, make_post):
        for name in ("zig corner", "Async Python", "go Weekly"):
            blog = services.create_blog(name=name, description="Notes", owner="bob")
            make_post(blog, f"Post in {name}")
            make_post(blog, f"Another in {name}")

        assert search.distinct_categories() == ["Async Python", "go Weekly", "zig corner"]

    def test_empty(self, db):
        assert search.distinct_categories() == []

    def test_cache_invalidated_on_publish(self, db, blog, post):
        """Test publishing a post shows up without waiting for the cache."""
        assert search.distinct_categories() == []
        services.update_post(
            blog.pk,
            post.pk,
            version=post.version,
            title=post.title,
            abstract=post.abstract,
            content=post.content,
            ready_status=ReadyStatus.PRODUCTION_READY,
            editor="alice",
        )
        assert search.distinct_categories() == ["Rust Notes"]

    def test_cache_invalidated_on_blog_rename(self, db, blog, make_post):
        make_post(blog, "Live Post")
        assert search.distinct_categories() == ["Rust Notes"]
        services.update_blog(
            blog.pk,
            version=blog.version,
            name="Rust Journal",
            description=blog.description,
            editor="alice",
        )
        assert search.distinct_categories() == ["Rust Journal"]

    def test_cache_serves_repeat_reads(self, db, blog, make_post, django_assert_num_queries):
        make_post(blog, "Live Post")
        search.distinct_categories()
        with django_assert_num_queries(0):
            assert search.distinct_categories() == ["Rust Notes"]


class TestDistinctTags:
    def test_frequency_then_first_seen(self, db, blog, make_post):
        """Test ["go","go","rust","go","ts"] ranks go, rust, ts."""
        make_post(blog, "One", tags=["go", "go"])
        make_post(blog, "Two", tags=["rust", "go"])
        make_post(blog, "Three", tags=["ts"])

        assert search.distinct_tags(3) == ["go", "rust", "ts"]

    def test_limit(self, db, blog, make_post):
        make_post(blog, "One", tags=["a", "b", "b", "c", "c", "c"])
        assert search.distinct_tags(2) == ["c", "b"]

    def test_counts_all_posts(self, db, blog, make_post):
        make_post(blog, "Draft", tags=["draft-only"], status=ReadyStatus.DRAFT)
        assert search.distinct_tags(5) == ["draft-only"]

    def test_default_limit(self, db, blog, make_post):
        make_post(blog, "Many", tags=[f"tag{index}" for index in range(20)])
        assert len(search.distinct_tags()) == 15

    @pytest.mark.parametrize("limit", [0, -1, "3", 2.5, True])
    def test_invalid_limit(self, db, limit):
        with pytest.raises(ValidationError):
            search.distinct_tags(limit)

    def test_cache_invalidated_on_delete(self, db, blog, post):
        assert search.distinct_tags(5) == ["rust", "memory"]
        services.delete_post(blog.pk, post.pk)
        assert search.distinct_tags(5) == []

    def test_direct_save_invalidates_on_commit(
        self, db, blog, post, django_capture_on_commit_callbacks
    ):
        """Test plain ORM writes drop the cache only once they commit."""
        assert search.distinct_tags(5) == ["rust", "memory"]
        with django_capture_on_commit_callbacks() as callbacks:
            Post.objects.get(pk=post.pk).tags.create(text="memory", position=2)
            assert search.distinct_tags(5) == ["rust", "memory"]

        assert search.invalidate in callbacks
        for callback in callbacks:
            callback()
        assert search.distinct_tags(5) == ["memory", "rust"]

    def test_delete_defers_signal_invalidation(
        self, db, blog, post, django_capture_on_commit_callbacks
    ):
        """Test cascaded deletes queue invalidation for commit time."""
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            services.delete_blog(blog.pk)
        assert callbacks
        assert all(callback == search.invalidate for callback in callbacks)
        assert search.distinct_tags(5) == []

    def test_service_delete_invalidates_after_transaction(self, db, blog, make_post):
        """Test service writes drop the cache after their transaction."""
        make_post(blog, "Live Post")
        assert search.distinct_categories() == ["Rust Notes"]
        other = services.create_blog(name="Async Python", description="Loops", owner="bob")
        Post.objects.create(
            blog=other,
            title="Published Directly",
            abstract="Bypasses services",
            content="x",
            author="bob",
            ready_status=ReadyStatus.PRODUCTION_READY,
        )
        services.delete_post(blog.pk, Post.objects.filter(blog=blog).get().pk)
        assert search.distinct_categories() == ["Async Python"]
