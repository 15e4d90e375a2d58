"""
Profile edit workflow.

ProfileEditSession holds the state of one "Edit Profile" dialog: the
field values being edited, the optimistic profile image preview, and
the two state machines that drive it.

    session = ProfileEditSession(
        user,
        controller=UserController(),
        uploader=ImageUploader(),
        on_update=refresh_page,
        on_close=close_dialog,
    )
    session.select_image(uploaded_file)
    session.submit({"username": "alice123", "bio": "hi"})

Form:   IDLE -> EDITING -> SUBMITTING -> CLOSED
                              |
                              +--> EDITING (failure)

Upload: IDLE -> SELECTING -> UPLOADING -> UPLOADED | FAILED
"""
import base64
import logging
from collections import namedtuple
from datetime import datetime, timezone as dt_timezone

from .conf import blog_settings
from .exceptions import (
    FormValidationError,
    ImageValidationError,
    MissingUserError,
    ProfileUpdateError,
    SubmitBlockedError,
    UploadError,
)
from .forms import ProfileEditForm, is_birthdate_disabled
from .uploads import validate_image

logger = logging.getLogger(__name__)

Notice = namedtuple("Notice", ["level", "title", "description"])


class FormState:
    IDLE = "idle"
    EDITING = "editing"
    SUBMITTING = "submitting"
    CLOSED = "closed"


class UploadState:
    IDLE = "idle"
    SELECTING = "selecting"
    UPLOADING = "uploading"
    UPLOADED = "uploaded"
    FAILED = "failed"


def to_data_url(file_obj):
    """Return a base64 data URL for a local preview of `file_obj`."""
    file_obj.seek(0)
    encoded = base64.b64encode(file_obj.read()).decode("ascii")
    file_obj.seek(0)
    return f"data:{file_obj.content_type};base64,{encoded}"


def serialize_birthdate(value):
    """Return a date as a UTC midnight ISO timestamp, or None."""
    if value is None:
        return None
    return datetime(value.year, value.month, value.day, tzinfo=dt_timezone.utc).isoformat()


class ProfileEditSession:
    """State of one profile edit dialog for `user` (a serialized user record)."""

    def __init__(self, user, controller, uploader, on_update=None, on_close=None, notify=None):
        self.user = user or {}
        self.controller = controller
        self.uploader = uploader
        self.on_update = on_update
        self.on_close = on_close
        self.notify = notify

        self.data = ProfileEditForm.initial_for(self.user)
        self.errors = {}
        self.notices = []
        self.preview = self.persisted_image
        self.pending_image = None
        self.form_state = FormState.IDLE
        self.upload_state = UploadState.IDLE

    @property
    def user_id(self):
        return self.user.get("id")

    @property
    def persisted_image(self):
        profile = self.user.get("profile") or {}
        return profile.get("pfp") or None

    @property
    def is_uploading(self):
        return self.upload_state == UploadState.UPLOADING

    @property
    def is_submitting(self):
        return self.form_state == FormState.SUBMITTING

    @property
    def is_open(self):
        return self.form_state != FormState.CLOSED

    @property
    def can_submit(self):
        return self.is_open and not self.is_submitting and not self.is_uploading

    @property
    def can_discard_image(self):
        """The "Remove" button is shown for a preview that is not yet saved."""
        return (
            bool(self.preview)
            and self.preview != self.persisted_image
            and not self.is_uploading
        )

    @property
    def bio_counter(self):
        return f"{len(self.data.get('bio') or '')}/{blog_settings.BIO_MAX_LENGTH} characters"

    def _notice(self, level, title, description):
        notice = Notice(level, title, description)
        self.notices.append(notice)
        if self.notify:
            self.notify(notice)
        return notice

    def _error(self, description):
        return self._notice("error", "Error", description)

    def change(self, **fields):
        """Update edited field values."""
        unknown = set(fields) - set(ProfileEditForm.base_fields)
        if unknown:
            raise KeyError(f"Unknown profile fields: {', '.join(sorted(unknown))}")
        self.data.update(fields)
        if self.form_state == FormState.IDLE:
            self.form_state = FormState.EDITING

    def select_birthdate(self, value):
        """
        Pick a birthdate as the date picker would.

        Returns False and leaves the value unchanged for a disabled date.
        """
        if value is not None and is_birthdate_disabled(value):
            return False
        self.change(birthdate=value)
        return True

    def select_image(self, file_obj):
        """
        Validate, preview and upload a newly selected profile image.

        Returns the uploaded image URL, or None when no file was selected.
        """
        if file_obj is None:
            return None
        if not self.user_id:
            self._error(MissingUserError.message)
            raise MissingUserError()

        self.upload_state = UploadState.SELECTING
        try:
            validate_image(file_obj)
        except ImageValidationError as exc:
            self.upload_state = UploadState.IDLE
            self._error(str(exc))
            raise

        self.pending_image = file_obj
        self.preview = to_data_url(file_obj)
        self.upload_state = UploadState.UPLOADING

        try:
            url = self.uploader.upload(file_obj, self.user)
        except Exception as exc:
            logger.exception("Error uploading profile image for user %s", self.user_id)
            self.preview = self.persisted_image
            self.pending_image = None
            self.upload_state = UploadState.FAILED
            self._error(UploadError.message)
            if isinstance(exc, UploadError):
                raise
            raise UploadError() from exc

        self.preview = url
        self.upload_state = UploadState.UPLOADED
        self._notice("success", "Success", "Profile image uploaded successfully")
        return url

    def discard_image(self):
        """Drop the selected image and show the saved one again."""
        if self.is_uploading:
            raise SubmitBlockedError()
        self.pending_image = None
        self.preview = self.persisted_image
        self.upload_state = UploadState.IDLE

    def build_payload(self, cleaned_data):
        """Build the partial user record sent to the controller."""
        return {
            "username": cleaned_data["username"],
            "firstName": cleaned_data.get("first_name") or "",
            "lastName": cleaned_data.get("last_name") or "",
            "location": cleaned_data.get("location") or "",
            "about": cleaned_data.get("about") or "",
            "profile": {
                "bio": cleaned_data.get("bio") or None,
                "website": cleaned_data.get("website") or None,
                "birthdate": serialize_birthdate(cleaned_data.get("birthdate")),
                "pfp": self.preview,
            },
        }

    def submit(self, data=None):
        """
        Validate and save the profile.

        Returns the updated user record. On failure the session stays
        open with the entered values.
        """
        if not self.user_id:
            self._error(MissingUserError.message)
            raise MissingUserError()
        if not self.can_submit:
            raise SubmitBlockedError()

        if data:
            self.change(**data)

        result = ProfileEditForm.validate(self.data)
        if not result.ok:
            self.errors = result.errors
            self.form_state = FormState.EDITING
            raise FormValidationError(result.errors)
        self.errors = {}

        payload = self.build_payload(result.cleaned_data)
        self.form_state = FormState.SUBMITTING
        try:
            updated = self.controller.update_profile(self.user_id, payload)
            if not updated:
                raise ProfileUpdateError()
        except Exception as exc:
            logger.exception("Error updating profile for user %s", self.user_id)
            self.form_state = FormState.EDITING
            self._error(ProfileUpdateError.message)
            raise ProfileUpdateError() from exc

        self.user = updated
        self.pending_image = None
        self._notice("success", "Success", "Profile updated successfully")
        if self.on_update:
            self.on_update(updated)
        self.close()
        return updated

    def close(self):
        """Close the dialog."""
        self.form_state = FormState.CLOSED
        if self.on_close:
            self.on_close()
