"""
Exceptions raised by django-social-blog.

Model invariants (blog image counts, self-follows) use Django's
ValidationError; everything else derives from SocialBlogError.
"""


class SocialBlogError(Exception):
    """Base class for social_blog errors."""

    message = "Something went wrong. Please try again."

    def __init__(self, message=None):
        super().__init__(message or self.message)


# Preconditions

class MissingUserError(SocialBlogError):
    message = "User data is missing. Please try again."


# Validation

class ImageValidationError(SocialBlogError):
    """A selected image was rejected before upload."""


class ImageTooLargeError(ImageValidationError):
    message = "Image size must be less than 5MB"


class InvalidImageTypeError(ImageValidationError):
    message = "Only image files are allowed"


class FormValidationError(SocialBlogError):
    """Profile form data failed validation."""

    message = "Please correct the errors below."

    def __init__(self, errors, message=None):
        super().__init__(message)
        self.errors = errors


class InvalidPayloadError(SocialBlogError):
    message = "Invalid profile update payload."


class UsernameTakenError(SocialBlogError):
    message = "This username is already taken."


# Transport / server

class UploadError(SocialBlogError):
    message = "Failed to upload profile image. Please try again."


class ProfileUpdateError(SocialBlogError):
    message = "Failed to update profile. Please try again."


# State

class SubmitBlockedError(SocialBlogError):
    message = "Please wait for the current operation to finish."


class TokenExpiredError(SocialBlogError):
    message = "This token has expired."
