"""
Document and picture uploads.

Clients send files as base64 strings (optionally as ``data:`` URLs)
inside the JSON body.  They are decoded, checked against the upload
constraints in settings and written through Django's storage API, which
returns the public URL stored on the entity.
"""
import base64
import binascii
import logging
import re
import uuid
from datetime import date
from typing import Optional

from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage

from directory.exceptions import UploadFailed

logger = logging.getLogger(__name__)

_DATA_URL = re.compile(r'^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[\w=.+-]+)*;base64,(?P<data>.*)$', re.S)

_EXTENSIONS = {
    'image/jpeg': '.jpg',
    'image/png': '.png',
    'image/gif': '.gif',
    'image/webp': '.webp',
    'application/pdf': '.pdf',
}


def _sniff(raw: bytes) -> Optional[str]:
    if raw.startswith(b'\xff\xd8\xff'):
        return 'image/jpeg'
    if raw.startswith(b'\x89PNG\r\n\x1a\n'):
        return 'image/png'
    if raw[:6] in (b'GIF87a', b'GIF89a'):
        return 'image/gif'
    if raw[:4] == b'RIFF' and raw[8:12] == b'WEBP':
        return 'image/webp'
    if raw.startswith(b'%PDF'):
        return 'application/pdf'
    return None


def decode(content: str):
    """Return ``(bytes, mime)`` for a base64 string or data URL."""
    if not content or not isinstance(content, str):
        raise UploadFailed('Invalid file data provided')
    mime = None
    m = _DATA_URL.match(content.strip())
    if m:
        mime = m.group('mime')
        content = m.group('data')
    try:
        raw = base64.b64decode(re.sub(r'\s+', '', content), validate=True)
    except (binascii.Error, ValueError):
        raise UploadFailed('File data is not valid base64')
    if not raw:
        raise UploadFailed('Invalid file data provided')
    sniffed = _sniff(raw)
    if sniffed:
        return raw, sniffed
    # image and pdf labels must be backed by the file signature
    if mime and (mime.startswith('image/') or mime == 'application/pdf'):
        logger.warning('Declared type %s does not match file content', mime)
        mime = None
    return raw, mime or 'application/octet-stream'


def upload(content: str, folder: str) -> str:
    """Store a base64 file under ``folder`` and return its URL.

    Any failure, including storage errors, surfaces as ``UploadFailed``.
    """
    raw, mime = decode(content)
    size_mb = len(raw) / (1024 * 1024)
    if size_mb > settings.UPLOAD_MAX_MB:
        raise UploadFailed('File too large')
    if not any(mime.startswith(prefix) for prefix in settings.ALLOWED_UPLOAD_TYPES if prefix):
        raise UploadFailed(f'Unsupported file type: {mime}')

    ext = _EXTENSIONS.get(mime, '')
    path = f"{settings.UPLOAD_ROOT_FOLDER}/{folder}/{date.today().strftime('%Y/%m')}/{uuid.uuid4().hex}{ext}"
    try:
        name = default_storage.save(path, ContentFile(raw))
        url = default_storage.url(name)
    except Exception as e:
        logger.error('Upload to %s failed: %s', folder, e)
        raise UploadFailed(f'Failed to upload file: {e}')
    logger.info('Uploaded %s (%d bytes)', name, len(raw))
    return url


def _name_from_url(url: str) -> Optional[str]:
    base = settings.MEDIA_URL or ''
    if base and url.startswith(base):
        return url[len(base):]
    marker = f'{settings.UPLOAD_ROOT_FOLDER}/'
    index = url.find(marker)
    return url[index:] if index >= 0 else None


def discard(url: Optional[str]) -> None:
    """Remove a previously uploaded file.  Errors are logged, not raised."""
    if not url:
        return
    name = _name_from_url(url)
    if not name:
        return
    try:
        default_storage.delete(name)
    except Exception as e:
        logger.warning('Could not remove uploaded file %s: %s', name, e)
