"""
Image attachment codec for django-blog-store.

Uploaded images are stored inline on the blog or post row as raw bytes
plus the media type the client declared.
"""
import base64
import logging
import mimetypes

from django.core.files import File
from django.core.files.uploadedfile import UploadedFile

from .conf import blog_settings
from .exceptions import AttachmentReadError, AttachmentTooLarge

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def content_type(upload):
    """
    Return the media type declared for ``upload``.

    The declared type is recorded verbatim. Objects that declare none
    (plain files) fall back to a guess from their name.
    """
    if upload is None:
        return ""
    declared = getattr(upload, "content_type", None)
    if declared:
        return declared
    guessed, _ = mimetypes.guess_type(getattr(upload, "name", None) or "")
    return guessed or DEFAULT_CONTENT_TYPE


def encode_image(upload):
    """
    Read an uploaded image into memory.

    Args:
        upload: Django UploadedFile or any binary file-like object

    Returns:
        (bytes, content type) tuple, or (None, "") when there is no upload

    Raises:
        AttachmentTooLarge: the stream exceeds ATTACHMENT_MAX_SIZE
        AttachmentReadError: the stream could not be read completely
    """
    if upload is None:
        return None, ""

    source = upload
    if not hasattr(upload, "chunks"):
        upload = File(upload)

    limit = blog_settings.ATTACHMENT_MAX_SIZE
    declared_size = upload.size if isinstance(upload, UploadedFile) else None
    if limit is not None and declared_size is not None and declared_size > limit:
        logger.warning("Rejected attachment %r: %d bytes", upload.name, declared_size)
        raise AttachmentTooLarge(declared_size, limit)

    buffer = bytearray()
    try:
        for chunk in upload.chunks():
            buffer.extend(chunk)
            if limit is not None and len(buffer) > limit:
                logger.warning("Rejected attachment %r: over %d bytes", upload.name, limit)
                raise AttachmentTooLarge(len(buffer), limit)
    except OSError as exc:
        raise AttachmentReadError(f"Could not read attachment {upload.name!r}: {exc}") from exc

    if declared_size is not None and len(buffer) != declared_size:
        raise AttachmentReadError(
            f"Attachment {upload.name!r} is truncated: "
            f"read {len(buffer)} of {declared_size} bytes"
        )

    return bytes(buffer), content_type(source)


def decode_image(data, mime_type):
    """
    Return a ``data:`` URI for a stored image, or None when there is none.

    Used by templates to inline the image without a separate request.
    """
    if not data:
        return None
    encoded = base64.b64encode(bytes(data)).decode("ascii")
    return f"data:{mime_type or DEFAULT_CONTENT_TYPE};base64,{encoded}"
