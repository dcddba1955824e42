"""
Errors raised by the blog store.

Callers (views, API handlers) translate these into responses:

    ValidationError      -> re-render the form with ``errors``
    NotFound             -> 404
    ConcurrencyConflict  -> ask the user to reload and retry
    StorageError         -> 500

StorageError derives from OSError so it can be handled as an ``IOError``.
"""


class BlogStoreError(Exception):
    """Base exception for blog store errors."""


class ValidationError(BlogStoreError):
    """Input is missing or malformed."""

    def __init__(self, errors, message=None):
        if isinstance(errors, str):
            errors = {"__all__": [errors]}
        self.errors = {field: list(messages) for field, messages in errors.items()}
        if message is None:
            message = "; ".join(
                f"{field}: {' '.join(messages)}" for field, messages in self.errors.items()
            )
        super().__init__(message)

    @classmethod
    def from_django(cls, exc):
        """Build from a ``django.core.exceptions.ValidationError``."""
        if hasattr(exc, "error_dict"):
            return cls(exc.message_dict)
        return cls({"__all__": exc.messages})


class AttachmentTooLarge(ValidationError):
    """Attachment exceeds ATTACHMENT_MAX_SIZE."""

    def __init__(self, size, limit):
        self.size = size
        self.limit = limit
        super().__init__(
            {"image": [f"Attachment is larger than {limit} bytes."]},
        )


class NotFound(BlogStoreError):
    """Referenced blog or post does not exist."""


class ConcurrencyConflict(BlogStoreError):
    """The record changed since the caller loaded it."""

    def __init__(self, model_name, pk, version):
        self.model_name = model_name
        self.pk = pk
        self.version = version
        super().__init__(
            f"{model_name} {pk} was modified by someone else "
            f"(expected version {version}); reload and try again"
        )


class StorageError(BlogStoreError, OSError):
    """Persistence failed."""


class AttachmentReadError(StorageError):
    """Attachment stream could not be read completely."""


class ListingUnavailable(NotFound, StorageError):
    """The listing query itself failed."""
