"""
User, Profile, Follow and token models for django-social-blog.
"""
import logging
import secrets
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from ..conf import blog_settings
from ..exceptions import TokenExpiredError

logger = logging.getLogger(__name__)


class User(AbstractUser):
    """
    Platform user.

    Set AUTH_USER_MODEL = "social_blog.User" in your project settings.
    """

    email = models.EmailField(unique=True)
    is_verified = models.BooleanField(
        default=False,
        help_text="Whether the user confirmed their e-mail address",
    )
    location = models.CharField(max_length=255, blank=True)
    about = models.TextField(blank=True)

    class Meta:
        ordering = ["username"]

    def __str__(self):
        return self.username

    @property
    def display_name(self):
        """Return full name, falling back to username."""
        full_name = self.get_full_name()
        return full_name or self.username

    @property
    def initials(self):
        """Return avatar fallback text."""
        return self.username[:2].upper()

    def get_profile(self):
        """Return this user's profile, creating it on first access."""
        return Profile.objects.for_user(self)

    @property
    def follower_count(self):
        return self.followers.count()

    @property
    def following_count(self):
        return self.following.count()

    def is_following(self, other):
        """Check if this user follows `other`."""
        return self.following.filter(following=other).exists()


class ProfileManager(models.Manager):
    def for_user(self, user):
        profile, created = self.get_or_create(user=user)
        if created:
            logger.debug("Created profile for user %s", user.pk)
        return profile


class Profile(models.Model):
    """
    Public profile details, one per user.

    Profiles are created lazily via User.get_profile().
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    bio = models.CharField(
        max_length=blog_settings.BIO_MAX_LENGTH,
        blank=True,
        null=True,
    )
    pfp = models.URLField(
        max_length=500,
        blank=True,
        null=True,
        help_text="Profile picture URL",
    )
    birthdate = models.DateField(null=True, blank=True)
    website = models.URLField(max_length=255, blank=True, null=True)

    objects = ProfileManager()

    def __str__(self):
        return f"Profile of {self.user}"

    @property
    def age(self):
        """Return age in whole years, or None without a birthdate."""
        if not self.birthdate:
            return None
        today = timezone.localdate()
        years = today.year - self.birthdate.year
        if (today.month, today.day) < (self.birthdate.month, self.birthdate.day):
            years -= 1
        return years


class Follow(models.Model):
    """
    Directed follow edge between two users.

    A row exists while `follower` follows `following`.
    """

    follower = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="following",
    )
    following = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="followers",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["follower", "following"],
                name="unique_follow",
            ),
        ]

    def __str__(self):
        return f"{self.follower} follows {self.following}"

    def clean(self):
        if self.follower_id == self.following_id:
            raise ValidationError("Users cannot follow themselves.")

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)

    @classmethod
    def toggle(cls, follower, following):
        """
        Follow or unfollow a user.

        Returns (follow_or_none, "created" | "removed")
        """
        existing = cls.objects.filter(follower=follower, following=following).first()
        if existing:
            existing.delete()
            return None, "removed"
        return cls.objects.create(follower=follower, following=following), "created"


class UserToken(models.Model):
    """Single-use token bound to a user with an expiry time."""

    TTL_SETTING = None

    token = models.CharField(max_length=64, unique=True)
    expires_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.__class__.__name__} for {self.user}"

    @property
    def is_expired(self):
        return timezone.now() >= self.expires_at

    @classmethod
    def issue(cls, user):
        """Create a fresh token for `user`."""
        hours = getattr(blog_settings, cls.TTL_SETTING)
        token = cls.objects.create(
            user=user,
            token=secrets.token_urlsafe(32),
            expires_at=timezone.now() + timedelta(hours=hours),
        )
        logger.debug("Issued %s for user %s", cls.__name__, user.pk)
        return token

    @classmethod
    def purge_expired(cls):
        """Delete expired tokens, returning the number removed."""
        deleted, _ = cls.objects.filter(expires_at__lte=timezone.now()).delete()
        return deleted


class VerificationToken(UserToken):
    """E-mail verification token."""

    TTL_SETTING = "VERIFICATION_TOKEN_TTL_HOURS"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="verification_tokens",
    )

    def consume(self):
        """Mark the user verified and delete this token."""
        if self.is_expired:
            raise TokenExpiredError()
        user = self.user
        user.is_verified = True
        user.save(update_fields=["is_verified"])
        self.delete()
        return user


class PasswordResetToken(UserToken):
    """Password reset token."""

    TTL_SETTING = "PASSWORD_RESET_TOKEN_TTL_HOURS"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="password_reset_tokens",
    )

    def reset_password(self, raw_password):
        """Set a new password for the user and delete this token."""
        if self.is_expired:
            raise TokenExpiredError()
        user = self.user
        user.set_password(raw_password)
        user.save(update_fields=["password"])
        self.delete()
        return user
