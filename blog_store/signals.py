"""
Keep the category/tag index fresh.

Any saved or deleted blog, post or tag can change the facets, so the
cached index is dropped once the write commits. Bulk ``QuerySet.update()``
calls bypass these signals; the service layer invalidates explicitly
after those.
"""
from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from . import search
from .models import Blog, Post, Tag


@receiver(post_save, sender=Blog)
@receiver(post_delete, sender=Blog)
@receiver(post_save, sender=Post)
@receiver(post_delete, sender=Post)
@receiver(post_save, sender=Tag)
@receiver(post_delete, sender=Tag)
def invalidate_index(sender, using=None, **kwargs):
    transaction.on_commit(search.invalidate, using=using)
