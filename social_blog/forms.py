"""
Forms for django-social-blog.
"""
from collections import namedtuple

from django import forms
from django.core.validators import URLValidator
from django.utils import timezone
from django.utils.dateparse import parse_date

from .conf import blog_settings
from .exceptions import ImageValidationError
from .uploads import validate_image

ValidationResult = namedtuple("ValidationResult", ["ok", "cleaned_data", "errors"])


def is_birthdate_disabled(value, today=None):
    """Return True if the date picker should not offer `value`."""
    today = today or timezone.localdate()
    return value > today or value < blog_settings.BIRTHDATE_MIN_DATE


class BirthdateInput(forms.DateInput):
    """Native date picker limited to BIRTHDATE_MIN..today."""

    input_type = "date"

    def get_context(self, name, value, attrs):
        attrs = dict(attrs or {})
        attrs.setdefault("min", blog_settings.BIRTHDATE_MIN)
        attrs.setdefault("max", timezone.localdate().isoformat())
        return super().get_context(name, value, attrs)


class ProfileEditForm(forms.Form):
    """Fields a user may change on their own profile."""

    username = forms.CharField(
        min_length=blog_settings.USERNAME_MIN_LENGTH,
        max_length=blog_settings.USERNAME_MAX_LENGTH,
        help_text="This is your public display name.",
        error_messages={
            "min_length": "Username must be at least %(limit_value)d characters.",
            "max_length": "Username must not be longer than %(limit_value)d characters.",
        },
    )
    first_name = forms.CharField(required=False)
    last_name = forms.CharField(required=False)
    location = forms.CharField(required=False)
    about = forms.CharField(required=False, widget=forms.Textarea)
    bio = forms.CharField(
        required=False,
        max_length=blog_settings.BIO_MAX_LENGTH,
        widget=forms.Textarea,
        error_messages={
            "max_length": "Bio must not be longer than %(limit_value)d characters.",
        },
    )
    # Empty string means "no website"; anything else must carry a scheme.
    website = forms.CharField(
        required=False,
        validators=[URLValidator(message="Please enter a valid URL.")],
        help_text="Your personal or professional website",
    )
    birthdate = forms.DateField(
        required=False,
        widget=BirthdateInput,
        help_text="Your date of birth is used to calculate your age.",
    )

    @classmethod
    def initial_for(cls, user):
        """Build initial form values from a user record."""
        user = user or {}
        profile = user.get("profile") or {}
        birthdate = profile.get("birthdate")
        return {
            "username": user.get("username") or "",
            "first_name": user.get("firstName") or "",
            "last_name": user.get("lastName") or "",
            "location": user.get("location") or "",
            "about": user.get("about") or "",
            "bio": profile.get("bio") or "",
            "website": profile.get("website") or "",
            "birthdate": parse_date(birthdate[:10]) if birthdate else None,
        }

    @classmethod
    def validate(cls, data):
        """Validate `data` and return a ValidationResult."""
        form = cls(data=data)
        if form.is_valid():
            return ValidationResult(True, form.cleaned_data, {})
        errors = {field: list(messages) for field, messages in form.errors.items()}
        return ValidationResult(False, None, errors)


class ImageUploadForm(forms.Form):
    """Server-side validation for POST /api/upload."""

    TYPE_CHOICES = [
        ("profile", "Profile"),
        ("blog", "Blog"),
    ]

    file = forms.FileField()
    type = forms.ChoiceField(choices=TYPE_CHOICES, required=False)

    def clean_file(self):
        file_obj = self.cleaned_data["file"]
        try:
            validate_image(file_obj)
        except ImageValidationError as exc:
            raise forms.ValidationError(str(exc))
        return file_obj

    def clean_type(self):
        return self.cleaned_data.get("type") or "profile"
