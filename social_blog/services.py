"""
Server-side profile updates.

update_profile() applies a partial user record (camelCase keys, with an
optional nested "profile" record) to a stored user. Keys present in the
payload overwrite the stored value, including an explicit None which
clears the field; keys absent from the payload leave the stored value
untouched.
"""
import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.validators import URLValidator
from django.db import IntegrityError, transaction
from django.utils.dateparse import parse_date, parse_datetime

from .conf import blog_settings
from .exceptions import InvalidPayloadError, MissingUserError, UsernameTakenError
from .models import Profile

logger = logging.getLogger(__name__)

# payload key -> User attribute
USER_FIELDS = {
    "username": "username",
    "firstName": "first_name",
    "lastName": "last_name",
    "location": "location",
    "about": "about",
}

PROFILE_FIELDS = ("bio", "website", "birthdate", "pfp")


def merge_partial(current, incoming):
    """
    Merge `incoming` over `current` and return a new dict.

    Every key present in `incoming` wins, even when its value is None.
    """
    merged = dict(current)
    merged.update(incoming)
    return merged


def parse_birthdate(value):
    """Parse a date or ISO timestamp string into a date (None passes through)."""
    if value in (None, ""):
        return None
    try:
        parsed = parse_datetime(value)
        if parsed is not None:
            return parsed.date()
        parsed = parse_date(value)
    except (TypeError, ValueError):
        parsed = None
    if parsed is None:
        raise InvalidPayloadError(f"Invalid birthdate: {value!r}")
    return parsed


def _check_keys(data, allowed, where):
    unknown = set(data) - set(allowed)
    if unknown:
        raise InvalidPayloadError(
            f"Unknown {where} fields: {', '.join(sorted(unknown))}"
        )


def _text_value(key, value, field, allow_none):
    """Type-check `value` and run the model field's validators on it."""
    if value is None or value == "":
        return None if allow_none else ""
    if not isinstance(value, str):
        raise InvalidPayloadError(f"{key} must be a string.")
    try:
        field.run_validators(value)
    except ValidationError as exc:
        raise InvalidPayloadError(f"{key}: {' '.join(exc.messages)}")
    return value


def _clean_user_fields(data):
    User = get_user_model()
    values = {}
    for key, attr in USER_FIELDS.items():
        if key not in data:
            continue
        value = data[key]
        if key == "username":
            if not isinstance(value, str) or not value.strip():
                raise InvalidPayloadError("Username is required.")
            value = value.strip()
            low = blog_settings.USERNAME_MIN_LENGTH
            high = blog_settings.USERNAME_MAX_LENGTH
            if not low <= len(value) <= high:
                raise InvalidPayloadError(
                    f"Username must be between {low} and {high} characters."
                )
        # text columns are NOT NULL; None clears to blank
        values[attr] = _text_value(key, value, User._meta.get_field(attr), allow_none=False)
    return values


def _clean_profile_fields(data):
    values = {}
    if "bio" in data:
        bio = data["bio"]
        if isinstance(bio, str) and len(bio) > blog_settings.BIO_MAX_LENGTH:
            raise InvalidPayloadError(
                f"Bio must not be longer than {blog_settings.BIO_MAX_LENGTH} characters."
            )
        values["bio"] = _text_value("bio", bio, Profile._meta.get_field("bio"), allow_none=True)
    if "website" in data:
        website = data["website"]
        if isinstance(website, str) and website:
            try:
                URLValidator()(website)
            except ValidationError:
                raise InvalidPayloadError("Please enter a valid URL.")
        values["website"] = _text_value(
            "website", website, Profile._meta.get_field("website"), allow_none=True
        )
    if "birthdate" in data:
        values["birthdate"] = parse_birthdate(data["birthdate"])
    if "pfp" in data:
        pfp = data["pfp"]
        if pfp and not isinstance(pfp, str):
            raise InvalidPayloadError("pfp must be a string.")
        max_length = Profile._meta.get_field("pfp").max_length
        if pfp and len(pfp) > max_length:
            raise InvalidPayloadError(f"pfp must not be longer than {max_length} characters.")
        values["pfp"] = pfp or None
    return values


def update_profile(user_id, data):
    """
    Apply a partial update to a user and their profile.

    Args:
        user_id: primary key of the user to update
        data: partial user record, e.g.
            {"username": "alice", "profile": {"bio": "hi"}}

    Returns:
        The refreshed User instance.
    """
    if not user_id:
        raise MissingUserError()
    if not isinstance(data, dict):
        raise InvalidPayloadError()

    _check_keys(data, list(USER_FIELDS) + ["profile"], "user")
    profile_data = data.get("profile") or {}
    if not isinstance(profile_data, dict):
        raise InvalidPayloadError("profile must be an object.")
    _check_keys(profile_data, PROFILE_FIELDS, "profile")

    User = get_user_model()
    user_values = _clean_user_fields(data)
    profile_values = _clean_profile_fields(profile_data)

    try:
        with transaction.atomic():
            try:
                user = User.objects.select_for_update().get(pk=user_id)
            except (User.DoesNotExist, ValueError):
                raise MissingUserError()

            username = user_values.get("username")
            if username and (
                User.objects.filter(username=username).exclude(pk=user.pk).exists()
            ):
                raise UsernameTakenError()

            current = {attr: getattr(user, attr) for attr in USER_FIELDS.values()}
            for attr, value in merge_partial(current, user_values).items():
                setattr(user, attr, value)
            user.save()

            profile = user.get_profile()
            current = {field: getattr(profile, field) for field in PROFILE_FIELDS}
            for field, value in merge_partial(current, profile_values).items():
                setattr(profile, field, value)
            profile.save()
    except IntegrityError:
        raise UsernameTakenError()

    logger.info("Updated profile for user %s", user.pk)
    user.refresh_from_db()
    return user
