"""
JSON views for django-social-blog.
"""
import json
import logging
import os
import uuid

from django.contrib.auth import get_user_model
from django.contrib.auth.mixins import LoginRequiredMixin
from django.core.exceptions import ValidationError
from django.core.files.storage import default_storage
from django.http import Http404, JsonResponse
from django.shortcuts import get_object_or_404
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from .conf import blog_settings
from .exceptions import (
    InvalidPayloadError,
    MissingUserError,
    UsernameTakenError,
)
from .forms import ImageUploadForm
from .models import Blog, Comment, Favorite, Follow, Like
from .serializers import serialize_comment, serialize_user
from .services import update_profile

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    InvalidPayloadError: 400,
    MissingUserError: 404,
    UsernameTakenError: 409,
}


def get_identified_user(request):
    """Return the user named by the x-user-id and x-user-username headers, or None."""
    user_id = request.headers.get("x-user-id") or ""
    username = request.headers.get("x-user-username")
    if not user_id.isdigit() or not username:
        return None
    return get_user_model().objects.filter(pk=user_id, username=username).first()


def get_visible_blog(request, pk):
    blog = get_object_or_404(Blog, pk=pk)
    if not blog.can_view(request.user):
        raise Http404("Blog not found")
    return blog


@method_decorator(csrf_exempt, name="dispatch")
class ImageUploadView(View):
    """
    Store an uploaded image and return its URL.

    The acting user is identified by the x-user-id and x-user-username
    headers.
    """

    def post(self, request):
        user = get_identified_user(request)
        if user is None:
            return JsonResponse({"error": "Unknown user"}, status=401)

        form = ImageUploadForm(request.POST, request.FILES)
        if not form.is_valid():
            errors = [message for messages in form.errors.values() for message in messages]
            return JsonResponse({"error": " ".join(errors)}, status=400)

        file_obj = form.cleaned_data["file"]
        upload_type = form.cleaned_data["type"]
        extension = os.path.splitext(file_obj.name)[1].lower()
        name = default_storage.save(
            f"{blog_settings.UPLOAD_PATH}{upload_type}/{user.pk}/{uuid.uuid4().hex}{extension}",
            file_obj,
        )
        url = request.build_absolute_uri(default_storage.url(name))
        logger.info("Stored %s image for user %s at %s", upload_type, user.pk, name)

        return JsonResponse({"url": url, "data": {"url": url}}, status=201)


class UserDetailView(View):
    """Return a user record."""

    def get(self, request, pk):
        user = get_object_or_404(get_user_model(), pk=pk)
        return JsonResponse(serialize_user(user))


@method_decorator(csrf_exempt, name="dispatch")
class ProfileUpdateView(View):
    """
    Apply a partial update to the acting user's own profile.

    The acting user is identified by the x-user-id and x-user-username
    headers.
    """

    def patch(self, request, pk):
        user = get_identified_user(request)
        if user is None:
            return JsonResponse({"error": "Unknown user"}, status=401)
        if user.pk != pk:
            return JsonResponse({"error": "You can only edit your own profile"}, status=403)

        try:
            data = json.loads(request.body or b"{}")
        except ValueError:
            return JsonResponse({"error": "Invalid JSON"}, status=400)

        try:
            user = update_profile(pk, data)
        except tuple(ERROR_STATUS) as exc:
            return JsonResponse({"error": str(exc)}, status=ERROR_STATUS[type(exc)])

        return JsonResponse(serialize_user(user))


class FollowToggleView(LoginRequiredMixin, View):
    """Follow or unfollow a user."""

    def post(self, request, pk):
        target = get_object_or_404(get_user_model(), pk=pk)
        try:
            follow, action = Follow.toggle(request.user, target)
        except ValidationError as exc:
            return JsonResponse({"error": exc.messages[0]}, status=400)

        return JsonResponse({
            "action": action,
            "following": follow is not None,
            "followers": target.follower_count,
        })


class LikeToggleView(LoginRequiredMixin, View):
    """Like or unlike a blog."""

    model = Like
    count_key = "likes"

    def post(self, request, pk):
        blog = get_visible_blog(request, pk)
        row, action = self.model.toggle(blog, request.user)

        return JsonResponse({
            "action": action,
            "active": row is not None,
            self.count_key: self.model.objects.filter(blog=blog).count(),
        })


class FavoriteToggleView(LikeToggleView):
    """Add or remove a blog from favorites."""

    model = Favorite
    count_key = "favorites"


class CommentCreateView(LoginRequiredMixin, View):
    """Add a comment to a blog."""

    def post(self, request, pk):
        blog = get_visible_blog(request, pk)

        content = request.POST.get("content", "").strip()
        if not content:
            return JsonResponse({"error": "Comment content required"}, status=400)
        if len(content) > blog_settings.COMMENT_MAX_LENGTH:
            return JsonResponse({"error": "Comment is too long"}, status=400)

        comment = Comment.objects.create(
            blog=blog,
            user=request.user,
            content=content,
        )
        return JsonResponse(serialize_comment(comment), status=201)
