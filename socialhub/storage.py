"""
S3 storage backend for user media
"""

import mimetypes

from storages.backends.s3boto3 import S3Boto3Storage

from socialhub.constants import ALLOWED_IMAGE_TYPES

EXTENSION_TYPES = {ext.lstrip("."): ctype for ctype, ext in ALLOWED_IMAGE_TYPES.items()}
EXTENSION_TYPES["jpeg"] = "image/jpeg"


class MediaStorage(S3Boto3Storage):
    """
    S3Boto3Storage that stores images with an explicit ContentType and an
    inline ContentDisposition so browsers render them instead of downloading.
    """

    location = "media"
    file_overwrite = False

    def get_object_parameters(self, name):
        params = super().get_object_parameters(name)

        content_type = self._get_content_type(name)
        params["ContentType"] = content_type
        if content_type.startswith("image/"):
            params["ContentDisposition"] = "inline"

        return params

    def _get_content_type(self, name):
        content_type, _ = mimetypes.guess_type(name)
        if content_type:
            return content_type

        extension = name.rsplit(".", 1)[-1].lower()
        return EXTENSION_TYPES.get(extension, "application/octet-stream")
