"""
Tests for the profile edit workflow.
"""
import datetime
from unittest import mock

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils import timezone

from social_blog.editing import (
    FormState,
    ProfileEditSession,
    UploadState,
    serialize_birthdate,
    to_data_url,
)
from social_blog.exceptions import (
    FormValidationError,
    ImageTooLargeError,
    InvalidImageTypeError,
    MissingUserError,
    ProfileUpdateError,
    SubmitBlockedError,
    UploadError,
)

OLD_PFP = "https://cdn.test/old.png"


@pytest.fixture
def user():
    return {
        "id": 1,
        "username": "alice",
        "firstName": "Alice",
        "lastName": "",
        "location": "",
        "about": "",
        "profile": {
            "bio": "old bio",
            "website": "https://alice.example.com",
            "birthdate": None,
            "pfp": OLD_PFP,
        },
    }


@pytest.fixture
def controller():
    return mock.Mock()


@pytest.fixture
def uploader():
    return mock.Mock()


@pytest.fixture
def callbacks():
    return mock.Mock()


@pytest.fixture
def session(user, controller, uploader, callbacks):
    return ProfileEditSession(
        user,
        controller=controller,
        uploader=uploader,
        on_update=callbacks.on_update,
        on_close=callbacks.on_close,
    )


@pytest.fixture
def image():
    return SimpleUploadedFile("me.png", b"\x89PNG fake", content_type="image/png")


class TestInitialState:
    def test_defaults_from_user(self, session):
        assert session.data["username"] == "alice"
        assert session.data["bio"] == "old bio"
        assert session.preview == OLD_PFP
        assert session.pending_image is None
        assert session.form_state == FormState.IDLE
        assert session.upload_state == UploadState.IDLE
        assert session.can_submit
        assert not session.can_discard_image

    def test_bio_counter(self, session):
        assert session.bio_counter == "7/160 characters"

    def test_change_moves_to_editing(self, session):
        session.change(location="Porto")
        assert session.form_state == FormState.EDITING
        assert session.data["location"] == "Porto"

    def test_change_rejects_unknown_fields(self, session):
        with pytest.raises(KeyError):
            session.change(password="nope")


class TestBirthdateSelection:
    def test_tomorrow_cannot_be_selected(self, session):
        tomorrow = timezone.localdate() + datetime.timedelta(days=1)
        assert not session.select_birthdate(tomorrow)
        assert session.data["birthdate"] is None

    def test_past_date_selected(self, session):
        assert session.select_birthdate(datetime.date(1990, 5, 17))
        assert session.data["birthdate"] == datetime.date(1990, 5, 17)


class TestImageUpload:
    def test_large_image_rejected_before_upload(self, session, uploader):
        big = SimpleUploadedFile(
            "big.png",
            b"0" * (5 * 1024 * 1024 + 1),
            content_type="image/png",
        )
        with pytest.raises(ImageTooLargeError):
            session.select_image(big)

        uploader.upload.assert_not_called()
        assert session.preview == OLD_PFP
        assert session.notices[-1].level == "error"

    def test_non_image_rejected_before_upload(self, session, uploader):
        doc = SimpleUploadedFile("cv.pdf", b"%PDF", content_type="application/pdf")
        with pytest.raises(InvalidImageTypeError):
            session.select_image(doc)

        uploader.upload.assert_not_called()
        assert session.notices[-1].description == "Only image files are allowed"
        assert session.upload_state == UploadState.IDLE

    def test_missing_user(self, controller, uploader, image):
        session = ProfileEditSession({}, controller=controller, uploader=uploader)
        with pytest.raises(MissingUserError):
            session.select_image(image)
        uploader.upload.assert_not_called()

    def test_no_file_selected(self, session, uploader):
        assert session.select_image(None) is None
        uploader.upload.assert_not_called()

    def test_successful_upload_sets_preview(self, session, uploader, user, image):
        uploader.upload.return_value = "https://x/img.png"

        assert session.select_image(image) == "https://x/img.png"

        uploader.upload.assert_called_once_with(image, user)
        assert session.preview == "https://x/img.png"
        assert session.pending_image is image
        assert session.upload_state == UploadState.UPLOADED
        assert session.can_discard_image

    def test_local_preview_while_uploading(self, session, uploader, image):
        seen = {}

        def upload(file_obj, user):
            seen["preview"] = session.preview
            seen["can_submit"] = session.can_submit
            return "https://x/img.png"

        uploader.upload.side_effect = upload
        session.select_image(image)

        assert seen["preview"] == to_data_url(image)
        assert seen["preview"].startswith("data:image/png;base64,")
        assert seen["can_submit"] is False

    def test_failed_upload_reverts_preview(self, session, uploader, image):
        uploader.upload.side_effect = UploadError()

        with pytest.raises(UploadError):
            session.select_image(image)

        assert session.preview == OLD_PFP
        assert session.pending_image is None
        assert session.upload_state == UploadState.FAILED
        assert session.notices[-1].description == (
            "Failed to upload profile image. Please try again."
        )
        assert session.can_submit

    def test_unexpected_upload_error_reverts_preview(self, session, uploader, image):
        uploader.upload.side_effect = OSError("disk full")

        with pytest.raises(UploadError):
            session.select_image(image)

        assert session.preview == OLD_PFP
        assert session.pending_image is None
        assert session.upload_state == UploadState.FAILED
        assert session.can_submit

    def test_discard_image(self, session, uploader, image):
        uploader.upload.return_value = "https://x/img.png"
        session.select_image(image)

        session.discard_image()

        assert session.preview == OLD_PFP
        assert session.pending_image is None

    def test_notify_callback(self, user, controller, uploader, image):
        notify = mock.Mock()
        uploader.upload.return_value = "https://x/img.png"
        session = ProfileEditSession(user, controller, uploader, notify=notify)

        session.select_image(image)

        notice = notify.call_args[0][0]
        assert notice.level == "success"
        assert notice.description == "Profile image uploaded successfully"


class TestSubmit:
    def test_end_to_end(self, session, controller, callbacks):
        updated = {"id": 1, "username": "alice123", "profile": {"bio": "hi"}}
        controller.update_profile.return_value = updated

        result = session.submit({"username": "alice123", "bio": "hi", "website": ""})

        assert result == updated
        user_id, payload = controller.update_profile.call_args[0]
        assert user_id == 1
        assert payload["username"] == "alice123"
        assert payload["profile"]["bio"] == "hi"
        assert payload["profile"]["website"] is None
        assert payload["profile"]["pfp"] == OLD_PFP
        callbacks.on_update.assert_called_once_with(updated)
        callbacks.on_close.assert_called_once_with()
        assert session.form_state == FormState.CLOSED
        assert not session.can_submit

    def test_payload_shape(self, session, controller):
        controller.update_profile.return_value = {"id": 1}
        session.select_birthdate(datetime.date(1990, 5, 17))

        session.submit({"first_name": "", "about": "About me"})

        payload = controller.update_profile.call_args[0][1]
        assert payload == {
            "username": "alice",
            "firstName": "",
            "lastName": "",
            "location": "",
            "about": "About me",
            "profile": {
                "bio": "old bio",
                "website": "https://alice.example.com",
                "birthdate": "1990-05-17T00:00:00+00:00",
                "pfp": OLD_PFP,
            },
        }

    def test_uploaded_image_is_submitted(self, session, controller, uploader, image):
        uploader.upload.return_value = "https://x/img.png"
        controller.update_profile.return_value = {"id": 1}

        session.select_image(image)
        session.submit()

        payload = controller.update_profile.call_args[0][1]
        assert payload["profile"]["pfp"] == "https://x/img.png"

    @pytest.mark.parametrize("username", ["ab", "a" * 31])
    def test_invalid_username_blocks_submit(self, session, controller, callbacks, username):
        with pytest.raises(FormValidationError) as excinfo:
            session.submit({"username": username})

        assert "username" in excinfo.value.errors
        assert session.errors == excinfo.value.errors
        assert session.form_state == FormState.EDITING
        controller.update_profile.assert_not_called()
        callbacks.on_update.assert_not_called()

    @pytest.mark.parametrize("username", ["abc", "a" * 30])
    def test_username_bounds_submit(self, session, controller, username):
        controller.update_profile.return_value = {"id": 1, "username": username}
        session.submit({"username": username})
        assert controller.update_profile.call_args[0][1]["username"] == username

    def test_invalid_website_blocks_submit(self, session, controller):
        with pytest.raises(FormValidationError):
            session.submit({"website": "not-a-url"})
        controller.update_profile.assert_not_called()

    def test_controller_failure_keeps_form_open(self, session, controller, callbacks):
        controller.update_profile.return_value = None

        with pytest.raises(ProfileUpdateError):
            session.submit({"location": "Porto"})

        assert session.form_state == FormState.EDITING
        assert session.data["location"] == "Porto"
        assert session.notices[-1].description == "Failed to update profile. Please try again."
        callbacks.on_update.assert_not_called()
        callbacks.on_close.assert_not_called()
        assert session.can_submit

    def test_controller_error_keeps_form_open(self, session, controller):
        controller.update_profile.side_effect = ProfileUpdateError()
        with pytest.raises(ProfileUpdateError):
            session.submit()
        assert session.form_state == FormState.EDITING

    def test_unexpected_controller_error_keeps_form_open(self, session, controller, callbacks):
        controller.update_profile.side_effect = RuntimeError("database is down")

        with pytest.raises(ProfileUpdateError):
            session.submit({"location": "Porto"})

        assert session.form_state == FormState.EDITING
        assert session.can_submit
        assert session.notices[-1].level == "error"
        callbacks.on_close.assert_not_called()

    def test_missing_user(self, controller, uploader):
        session = ProfileEditSession({"username": "alice"}, controller, uploader)
        with pytest.raises(MissingUserError):
            session.submit()
        controller.update_profile.assert_not_called()

    def test_submit_blocked_while_uploading(self, session, controller, uploader, image):
        def upload(file_obj, user):
            with pytest.raises(SubmitBlockedError):
                session.submit()
            return "https://x/img.png"

        uploader.upload.side_effect = upload
        session.select_image(image)
        controller.update_profile.assert_not_called()

    def test_cannot_submit_after_close(self, session, controller):
        session.close()
        with pytest.raises(SubmitBlockedError):
            session.submit()


def test_serialize_birthdate():
    assert serialize_birthdate(None) is None
    assert serialize_birthdate(datetime.date(2000, 1, 2)) == "2000-01-02T00:00:00+00:00"
