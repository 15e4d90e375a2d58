"""
Comment, Like and Favorite models for django-social-blog.
"""
from django.conf import settings
from django.db import models

from ..conf import blog_settings


class Comment(models.Model):
    """Comment on a blog."""

    blog = models.ForeignKey(
        "social_blog.Blog",
        on_delete=models.CASCADE,
        related_name="comments",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="comments",
    )
    content = models.TextField(max_length=blog_settings.COMMENT_MAX_LENGTH)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["blog", "created_at"]),
        ]

    def __str__(self):
        return f"Comment by {self.user} on {self.blog}"

    @property
    def preview(self):
        """Return truncated content for admin display."""
        if len(self.content) > 100:
            return self.content[:100] + "..."
        return self.content


class BlogMembership(models.Model):
    """
    A user's membership in a per-blog set (likes, favorites).

    Each (blog, user) pair appears at most once.
    """

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.user} {self._meta.verbose_name} {self.blog}"

    @classmethod
    def toggle(cls, blog, user):
        """
        Add or remove the user from this set for a blog.

        Returns (row_or_none, "created" | "removed")
        """
        existing = cls.objects.filter(blog=blog, user=user).first()
        if existing:
            existing.delete()
            return None, "removed"
        return cls.objects.create(blog=blog, user=user), "created"


class Like(BlogMembership):
    blog = models.ForeignKey(
        "social_blog.Blog",
        on_delete=models.CASCADE,
        related_name="likes",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="likes",
    )

    class Meta(BlogMembership.Meta):
        constraints = [
            models.UniqueConstraint(fields=["blog", "user"], name="unique_like"),
        ]


class Favorite(BlogMembership):
    blog = models.ForeignKey(
        "social_blog.Blog",
        on_delete=models.CASCADE,
        related_name="favorites",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="favorites",
    )

    class Meta(BlogMembership.Meta):
        constraints = [
            models.UniqueConstraint(fields=["blog", "user"], name="unique_favorite"),
        ]
