"""
django-blog-store - Content store for a Django blogging platform.

Features:
- Blogs and posts with inline image attachments
- Optimistic concurrency on every edit
- Readiness workflow (draft, submitted, preproduction, production ready)
- Cached category and tag facets
- Paginated listings by category, tag, blog and search term
"""

__version__ = "0.1.0"
