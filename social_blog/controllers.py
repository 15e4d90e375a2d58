"""
User controllers used by the profile edit workflow.

Both controllers expose update_profile(user_id, data) and return the
updated user record, or None when the update failed.
"""
import logging

import requests
from django.contrib.auth import get_user_model

from .conf import blog_settings
from .exceptions import SocialBlogError
from .serializers import serialize_user
from .services import update_profile
from .uploads import identity_headers

logger = logging.getLogger(__name__)


class UserController:
    """
    Talks to the user API over HTTP.

    Requests are made on behalf of `user`, the signed-in user's record.
    """

    def __init__(self, user=None, base_url=None, session=None, timeout=None):
        self.user = user
        self.base_url = (
            blog_settings.API_BASE_URL if base_url is None else base_url
        ).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout or blog_settings.HTTP_TIMEOUT

    def _url(self, path):
        return f"{self.base_url}/api/{path}"

    def _headers(self):
        return identity_headers(self.user) if self.user else {}

    def get_user(self, user_id):
        try:
            response = self.session.get(
                self._url(f"users/{user_id}/"),
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("Error fetching user %s: %s", user_id, exc)
            return None

    def update_profile(self, user_id, data):
        try:
            response = self.session.patch(
                self._url(f"users/{user_id}/profile/"),
                json=data,
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
            updated = response.json() or None
        except (requests.RequestException, ValueError) as exc:
            logger.error("Error updating profile for user %s: %s", user_id, exc)
            return None

        # a renamed user must send the new username from now on
        if updated and self.user and self.user.get("id") == updated.get("id"):
            self.user = updated
        return updated


class LocalUserController:
    """Applies updates in-process, for server-rendered pages and tests."""

    def get_user(self, user_id):
        user = get_user_model().objects.filter(pk=user_id).first()
        return serialize_user(user) if user else None

    def update_profile(self, user_id, data):
        try:
            user = update_profile(user_id, data)
        except SocialBlogError as exc:
            logger.error("Error updating profile for user %s: %s", user_id, exc)
            return None
        return serialize_user(user)
