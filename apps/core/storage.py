"""
Object storage for uploaded audio and images.

Files go through Django's ``default_storage``: S3Boto3Storage pointed at
Cloudflare R2 when R2 credentials are configured, the local filesystem
otherwise.
"""

import logging
import os
import secrets
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable, Optional
from urllib.parse import urlparse

from django.conf import settings
from django.core.files.storage import default_storage

from apps.core.exceptions import ErrorCode, ValidationError
from apps.core.metrics import increment_upload

logger = logging.getLogger(__name__)


@dataclass
class UploadResult:
    url: str
    pathname: str
    size: int

    def to_dict(self):
        return {'url': self.url, 'pathname': self.pathname, 'size': self.size}


def _validate(uploaded_file, allowed_types: Iterable[str], max_bytes: int, kind: str):
    if uploaded_file is None:
        raise ValidationError(f"No {kind} file provided", code=ErrorCode.MISSING_FIELD, field='file')

    content_type = (getattr(uploaded_file, 'content_type', '') or '').lower()
    if content_type not in allowed_types:
        increment_upload(kind, 'rejected')
        raise ValidationError(
            f"Invalid {kind} file type: {content_type or 'unknown'}",
            code=ErrorCode.INVALID_FILE,
            field='file',
            details={'allowed_types': sorted(allowed_types)},
        )

    if uploaded_file.size > max_bytes:
        increment_upload(kind, 'rejected')
        raise ValidationError(
            f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB",
            code=ErrorCode.INVALID_FILE,
            field='file',
        )


def validate_audio_file(uploaded_file):
    _validate(
        uploaded_file,
        settings.AUDIO_ALLOWED_TYPES,
        settings.AUDIO_MAX_UPLOAD_BYTES,
        'audio',
    )


def validate_image_file(uploaded_file):
    _validate(
        uploaded_file,
        settings.IMAGE_ALLOWED_TYPES,
        settings.IMAGE_MAX_UPLOAD_BYTES,
        'image',
    )


def build_pathname(folder: str, original_name: str) -> str:
    """``{folder}/{timestamp}-{random}{ext}``; the original name is never trusted."""
    from django.utils import timezone

    _, ext = os.path.splitext(original_name or '')
    stamp = int(timezone.now().timestamp() * 1000)
    return f"{folder.strip('/')}/{stamp}-{secrets.token_hex(6)}{ext.lower()[:10]}"


def upload(uploaded_file, folder: str = 'uploads', kind: str = 'audio') -> UploadResult:
    """Store a file and return its public URL, storage path and size."""
    pathname = build_pathname(folder, getattr(uploaded_file, 'name', ''))
    try:
        saved_path = default_storage.save(pathname, uploaded_file)
    except Exception:
        increment_upload(kind, 'error')
        logger.exception("Upload to %s failed", pathname)
        raise

    increment_upload(kind, 'success')
    url = default_storage.url(saved_path)
    logger.info("Uploaded %s (%s bytes)", saved_path, uploaded_file.size)
    return UploadResult(url=url, pathname=saved_path, size=uploaded_file.size)


def _pathname_from_url(url: str) -> Optional[str]:
    """Map a public URL back to its storage key."""
    if not url:
        return None
    path = urlparse(url).path.lstrip('/')
    media_prefix = settings.MEDIA_URL.strip('/')
    if media_prefix and path.startswith(media_prefix + '/'):
        path = path[len(media_prefix) + 1:]
    bucket = getattr(settings, 'AWS_STORAGE_BUCKET_NAME', '')
    if bucket and path.startswith(bucket + '/'):
        path = path[len(bucket) + 1:]
    return path or None


def delete(url: str) -> None:
    """Remove the object behind ``url``. Missing objects are ignored."""
    pathname = _pathname_from_url(url)
    if not pathname:
        return
    if default_storage.exists(pathname):
        default_storage.delete(pathname)
        logger.info("Deleted %s", pathname)


def discard(url: str) -> None:
    """
    Best-effort ``delete`` for cleanup that runs after the database change
    has committed. Storage errors are logged, not raised.
    """
    try:
        delete(url)
    except Exception:
        logger.exception("Failed to delete stored file %s", url)


@contextmanager
def discard_on_error():
    """
    Yield a list to collect the URLs of files uploaded inside the block.
    If the block raises, those files are discarded before the error
    propagates, so a rolled-back transaction leaves no orphans in storage.
    """
    uploaded = []
    try:
        yield uploaded
    except Exception:
        for url in uploaded:
            discard(url)
        raise
