"""
Image upload endpoint. Returned URLs are passed as ``images`` when creating
a post.
"""

import logging
from typing import List

from django.http import HttpRequest
from ninja import File, Router
from ninja.files import UploadedFile
from ninja.responses import codes_4xx

from posts.schemas import ImageUploadEnvelope
from socialhub.constants import MAX_POST_IMAGES
from socialhub.errors import ValidationFailed
from socialhub.schemas import ErrorOut, respond
from socialhub.uploads import store_image, validate_image
from users.auth import JWTAuth

logger = logging.getLogger(__name__)

router = Router(tags=["Uploads"])


@router.post(
    "/images",
    response={201: ImageUploadEnvelope, codes_4xx: ErrorOut},
    auth=JWTAuth(),
)
def upload_images(request: HttpRequest, images: List[UploadedFile] = File(...)):
    if not images:
        raise ValidationFailed("At least one image is required")
    if len(images) > MAX_POST_IMAGES:
        raise ValidationFailed(f"You can upload at most {MAX_POST_IMAGES} images")

    # Reject the whole batch before anything is written
    for image in images:
        validate_image(image)

    urls = [store_image(image, folder="posts") for image in images]
    logger.info(f"User {request.auth.id} uploaded {len(urls)} images")
    return respond(201, "Images uploaded successfully", {"images": urls})
