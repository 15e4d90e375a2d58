"""
Client for the image upload endpoint.

    uploader = ImageUploader(base_url="https://blog.example.com")
    url = uploader.upload(uploaded_file, user)
"""
import logging

import requests

from .conf import blog_settings
from .exceptions import (
    ImageTooLargeError,
    InvalidImageTypeError,
    MissingUserError,
    UploadError,
)

logger = logging.getLogger(__name__)


def validate_image(file_obj):
    """
    Reject files that are too large or are not images.

    Args:
        file_obj: Django UploadedFile or any object with `size` and
            `content_type`
    """
    if file_obj.size > blog_settings.PROFILE_IMAGE_MAX_BYTES:
        raise ImageTooLargeError(
            f"Image size must be less than {blog_settings.PROFILE_IMAGE_MAX_SIZE_MB}MB"
        )
    content_type = getattr(file_obj, "content_type", "") or ""
    if not content_type.startswith(blog_settings.ALLOWED_IMAGE_PREFIX):
        raise InvalidImageTypeError()


def identity_headers(user):
    """Return the headers identifying `user` (a user record) to the API."""
    return {
        "x-user-id": str(user["id"]),
        "x-user-username": user.get("username") or "",
    }


def extract_url(result):
    """Return the image URL from an upload response body."""
    if not isinstance(result, dict):
        return None
    data = result.get("data")
    return result.get("url") or (data.get("url") if isinstance(data, dict) else None)


class ImageUploader:
    """Posts images to the upload endpoint as multipart form data."""

    def __init__(self, base_url=None, session=None, timeout=None):
        self.base_url = (
            blog_settings.API_BASE_URL if base_url is None else base_url
        ).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout or blog_settings.HTTP_TIMEOUT

    @property
    def endpoint(self):
        return self.base_url + blog_settings.UPLOAD_URL

    def upload(self, file_obj, user, upload_type="profile"):
        """
        Upload an image on behalf of `user` and return its URL.

        Args:
            file_obj: Django UploadedFile
            user: user record with "id" and "username"
            upload_type: value of the "type" form field

        Raises:
            UploadError: on transport errors, non-2xx responses or a
                response without a URL
        """
        if not user or not user.get("id"):
            raise MissingUserError()

        file_obj.seek(0)
        files = {"file": (file_obj.name, file_obj.read(), file_obj.content_type)}
        headers = identity_headers(user)

        try:
            response = self.session.post(
                self.endpoint,
                files=files,
                data={"type": upload_type},
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Error uploading %s image: %s", upload_type, exc)
            raise UploadError() from exc

        if not response.ok:
            logger.error(
                "Upload rejected with status %s: %s",
                response.status_code,
                response.text,
            )
            raise UploadError()

        try:
            url = extract_url(response.json())
        except ValueError as exc:
            logger.error("Upload response was not JSON: %s", exc)
            raise UploadError() from exc

        if not url:
            logger.error("No image URL returned from server")
            raise UploadError()
        return url
