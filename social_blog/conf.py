"""
Configuration settings for django-social-blog.

Override these in your Django settings.py:

    SOCIAL_BLOG = {
        'PROFILE_IMAGE_MAX_SIZE_MB': 5,
        'BLOG_MAX_IMAGES': 5,
        'API_BASE_URL': 'https://blog.example.com',
        ...
    }
"""
import datetime

from django.conf import settings

DEFAULTS = {
    # Profile form
    "USERNAME_MIN_LENGTH": 3,
    "USERNAME_MAX_LENGTH": 30,
    "BIO_MAX_LENGTH": 160,
    "BIRTHDATE_MIN": "1900-01-01",

    # Profile images
    "PROFILE_IMAGE_MAX_SIZE_MB": 5,
    "ALLOWED_IMAGE_PREFIX": "image/",
    "UPLOAD_PATH": "social_blog/uploads/",

    # HTTP clients
    "API_BASE_URL": "",
    "UPLOAD_URL": "/api/upload",
    "HTTP_TIMEOUT": 10,

    # Blogs
    "VISIBILITY_CHOICES": [
        ("ONLY_ME", "Only me"),
        ("FOLLOWERS", "Followers"),
        ("PUBLIC", "Public"),
    ],
    "DEFAULT_VISIBILITY": "PUBLIC",
    "BLOG_MIN_IMAGES": 1,
    "BLOG_MAX_IMAGES": 5,
    "READING_WORDS_PER_MINUTE": 200,
    "EXCERPT_LENGTH": 200,
    "SLUG_MAX_LENGTH": 100,

    # Comments
    "COMMENT_MAX_LENGTH": 5000,

    # Tokens
    "VERIFICATION_TOKEN_TTL_HOURS": 24,
    "PASSWORD_RESET_TOKEN_TTL_HOURS": 1,
}


class SocialBlogSettings:
    """
    Lazy settings object that reads from Django settings.

    Access via: from social_blog.conf import blog_settings
    """

    def __getattr__(self, name):
        if name not in DEFAULTS:
            raise AttributeError(f"Invalid social_blog setting: {name}")

        user_settings = getattr(settings, "SOCIAL_BLOG", {})
        return user_settings.get(name, DEFAULTS[name])

    @property
    def PROFILE_IMAGE_MAX_BYTES(self):
        """Return the profile image size limit in bytes."""
        return self.PROFILE_IMAGE_MAX_SIZE_MB * 1024 * 1024

    @property
    def BIRTHDATE_MIN_DATE(self):
        """Return BIRTHDATE_MIN parsed as a date."""
        return datetime.date.fromisoformat(self.BIRTHDATE_MIN)


blog_settings = SocialBlogSettings()
