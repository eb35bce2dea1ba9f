"""
Avatar upload adapter.

Stores an uploaded image under ``<UPLOAD_FOLDER>/avatars`` with a generated
name and returns the public URL the User record keeps. Size is capped by
Flask's MAX_CONTENT_LENGTH before the view runs.
"""

import logging
import os
import secrets
import time

from werkzeug.utils import secure_filename

from issue_tracker.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

AVATAR_SUBDIR = "avatars"
ALLOWED_MIMETYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif"}
ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif"}


def avatar_dir(upload_root):
    return os.path.join(upload_root, AVATAR_SUBDIR)


def save_avatar(file_storage, upload_root, base_url):
    """Persist an uploaded avatar and return its URL.

    Args:
        file_storage: werkzeug ``FileStorage`` from ``request.files``.
        upload_root: the UPLOAD_FOLDER setting.
        base_url: scheme + host of the current request, e.g. ``http://host/``.

    Returns:
        ``<base_url>uploads/avatars/avatar-<ms>-<random><ext>``, or None when
        no file was sent.

    Raises:
        ValidationError: the file is not a JPEG, PNG or GIF image.
    """
    if file_storage is None or not file_storage.filename:
        return None

    filename = secure_filename(file_storage.filename)
    ext = os.path.splitext(filename)[1].lower()
    if file_storage.mimetype not in ALLOWED_MIMETYPES or ext not in ALLOWED_EXTENSIONS:
        raise ValidationError(
            "Only image files (jpeg, jpg, png, gif) are allowed",
            details={"avatar": file_storage.filename},
        )

    target_dir = avatar_dir(upload_root)
    os.makedirs(target_dir, exist_ok=True)
    name = f"avatar-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"
    file_storage.save(os.path.join(target_dir, name))
    logger.info("Saved avatar %s", name)

    return f"{base_url.rstrip('/')}/uploads/{AVATAR_SUBDIR}/{name}"
