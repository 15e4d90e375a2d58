"""
Django admin configuration for social_blog.
"""
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html

from .models import (
    User,
    Profile,
    Follow,
    VerificationToken,
    PasswordResetToken,
    Tag,
    Blog,
    BlogImage,
    Comment,
    Like,
    Favorite,
)


class ProfileInline(admin.StackedInline):
    model = Profile
    can_delete = False
    fields = ["bio", "pfp", "birthdate", "website"]


class BlogImageInline(admin.TabularInline):
    """Inline for managing images on blogs."""

    model = BlogImage
    extra = 1
    fields = ["url", "order"]


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ["username", "email", "first_name", "last_name", "is_verified", "is_staff"]
    list_filter = ["is_verified", "is_staff", "is_active"]
    inlines = [ProfileInline]
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Social", {"fields": ("is_verified", "location", "about")}),
    )


@admin.register(Follow)
class FollowAdmin(admin.ModelAdmin):
    list_display = ["follower", "following", "created_at"]
    search_fields = ["follower__username", "following__username"]
    raw_id_fields = ["follower", "following"]


@admin.register(VerificationToken, PasswordResetToken)
class TokenAdmin(admin.ModelAdmin):
    list_display = ["user", "expires_at", "created_at"]
    search_fields = ["user__username", "user__email"]
    raw_id_fields = ["user"]
    readonly_fields = ["token", "created_at"]


@admin.register(Tag)
class TagAdmin(admin.ModelAdmin):
    list_display = ["name", "slug", "blog_count", "created_at"]
    search_fields = ["name", "slug"]
    prepopulated_fields = {"slug": ("name",)}
    readonly_fields = ["created_at"]


@admin.register(Blog)
class BlogAdmin(admin.ModelAdmin):
    list_display = [
        "title_preview",
        "cover_preview",
        "author",
        "visibility",
        "reading_time",
        "created_at",
    ]
    list_filter = ["visibility", "created_at"]
    search_fields = ["title", "subtitle", "content", "author__username"]
    raw_id_fields = ["author"]
    date_hierarchy = "created_at"
    inlines = [BlogImageInline]
    readonly_fields = ["created_at", "updated_at"]

    fieldsets = (
        (None, {
            "fields": ("title", "subtitle", "description", "content", "excerpt", "author")
        }),
        ("Media", {
            "fields": ("featured_image",)
        }),
        ("Visibility", {
            "fields": ("visibility",)
        }),
        ("Metadata", {
            "fields": ("reading_time", "created_at", "updated_at"),
            "classes": ("collapse",),
        }),
    )

    def title_preview(self, obj):
        """Truncated title for list display."""
        return obj.title[:60] + "..." if len(obj.title) > 60 else obj.title

    title_preview.short_description = "Title"

    def cover_preview(self, obj):
        url = obj.cover_image
        if url:
            return format_html(
                '<img src="{}" style="max-width: 50px; max-height: 50px;" />',
                url,
            )
        return "-"

    cover_preview.short_description = "Cover"


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ["preview", "user", "blog", "created_at"]
    list_filter = ["created_at"]
    search_fields = ["content", "user__username", "blog__title"]
    raw_id_fields = ["blog", "user"]
    readonly_fields = ["created_at", "updated_at"]


@admin.register(Like, Favorite)
class BlogMembershipAdmin(admin.ModelAdmin):
    list_display = ["user", "blog", "created_at"]
    list_filter = ["created_at"]
    search_fields = ["user__username", "blog__title"]
    raw_id_fields = ["user", "blog"]
