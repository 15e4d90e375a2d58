"""
Models for django-social-blog.

All models are importable from social_blog.models:

    from social_blog.models import User, Profile, Blog, Tag, Comment, Like
"""
from .users import (
    User,
    Profile,
    Follow,
    VerificationToken,
    PasswordResetToken,
)
from .blogs import Tag, Blog, BlogImage, BlogTag
from .interactions import Comment, Like, Favorite

__all__ = [
    # Users
    "User",
    "Profile",
    "Follow",
    "VerificationToken",
    "PasswordResetToken",
    # Blogs
    "Tag",
    "Blog",
    "BlogImage",
    "BlogTag",
    # Interactions
    "Comment",
    "Like",
    "Favorite",
]
