import logging
import uuid

from django.core.files.storage import default_storage

from socialhub.constants import ALLOWED_IMAGE_TYPES, MAX_IMAGE_SIZE
from socialhub.errors import ValidationFailed

logger = logging.getLogger(__name__)


def validate_image(file):
    if file.content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationFailed(
            "Invalid file type. Only JPEG, PNG, GIF and WebP images are allowed"
        )
    if file.size > MAX_IMAGE_SIZE:
        raise ValidationFailed(
            f"File too large. Maximum size is {MAX_IMAGE_SIZE // (1024 * 1024)}MB"
        )


def store_image(file, folder: str = "posts") -> str:
    """
    Validate an uploaded image and save it under a random name.
    Returns the public URL of the stored file.
    """
    validate_image(file)

    name = f"{folder}/{uuid.uuid4().hex}{ALLOWED_IMAGE_TYPES[file.content_type]}"
    saved_name = default_storage.save(name, file)
    url = default_storage.url(saved_name)

    logger.info(f"Stored {file.name} ({file.size} bytes) as {saved_name}")
    return url


def delete_image(url: str) -> bool:
    """Best-effort removal of a previously stored image by URL."""
    prefix = default_storage.url("")
    if not url.startswith(prefix):
        return False
    try:
        default_storage.delete(url[len(prefix) :])
        return True
    except Exception as e:
        logger.warning(f"Could not delete stored image {url}: {e}")
        return False
