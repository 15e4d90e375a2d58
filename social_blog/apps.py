"""Django app configuration for social_blog."""
from django.apps import AppConfig


class SocialBlogConfig(AppConfig):
    """Configuration for the social blog app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "social_blog"
    verbose_name = "Social Blog"
