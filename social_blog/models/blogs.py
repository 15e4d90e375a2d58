"""
Blog, BlogImage, Tag and BlogTag models for django-social-blog.
"""
import math

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.utils.text import slugify

from ..conf import blog_settings


class Tag(models.Model):
    """
    Flat tag for blogs.

    Tags are non-hierarchical and can be applied to multiple blogs.
    """

    name = models.CharField(max_length=100, unique=True)
    slug = models.SlugField(max_length=100, unique=True, allow_unicode=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        # Distinct names can slugify alike ("Hello World", "hello-world")
        if not self.slug:
            max_length = blog_settings.SLUG_MAX_LENGTH
            base_slug = slugify(self.name, allow_unicode=True)[:max_length] or "tag"
            slug = base_slug
            counter = 1
            while Tag.objects.filter(slug=slug).exclude(pk=self.pk).exists():
                suffix = f"-{counter}"
                slug = base_slug[:max_length - len(suffix)] + suffix
                counter += 1
            self.slug = slug
        super().save(*args, **kwargs)

    @property
    def blog_count(self):
        """Return count of public blogs with this tag."""
        return self.blogs.filter(visibility="PUBLIC").count()


class Blog(models.Model):
    """
    Blog post.

    Supports:
    - Visibility levels (only me, followers, public)
    - Between BLOG_MIN_IMAGES and BLOG_MAX_IMAGES images
    - Computed reading time and excerpt
    """

    VISIBILITY_CHOICES = blog_settings.VISIBILITY_CHOICES

    # Content
    title = models.CharField(max_length=255)
    subtitle = models.CharField(max_length=255, blank=True)
    description = models.TextField(blank=True)
    content = models.TextField()
    excerpt = models.TextField(
        blank=True,
        help_text="Optional manual excerpt. Auto-generated if blank.",
    )
    featured_image = models.URLField(max_length=500, blank=True)
    reading_time = models.PositiveIntegerField(
        default=0,
        help_text="Estimated reading time in minutes",
    )

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="blogs",
    )
    visibility = models.CharField(
        max_length=20,
        choices=VISIBILITY_CHOICES,
        default=blog_settings.DEFAULT_VISIBILITY,
    )
    tags = models.ManyToManyField(
        Tag,
        through="BlogTag",
        related_name="blogs",
        blank=True,
    )

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["visibility", "-created_at"]),
            models.Index(fields=["author", "-created_at"]),
        ]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        if not self.reading_time:
            self.reading_time = self.estimate_reading_time(self.content)
        if not self.excerpt and self.content:
            length = blog_settings.EXCERPT_LENGTH
            if len(self.content) > length:
                self.excerpt = self.content[:length].rstrip() + "..."
            else:
                self.excerpt = self.content
        super().save(*args, **kwargs)

    @staticmethod
    def estimate_reading_time(text):
        """Return reading time in minutes, at least 1."""
        words = len(text.split()) if text else 0
        return max(1, math.ceil(words / blog_settings.READING_WORDS_PER_MINUTE))

    @property
    def cover_image(self):
        """Return featured image, falling back to the first blog image."""
        if self.featured_image:
            return self.featured_image
        first = self.images.order_by("order", "pk").first()
        return first.url if first else None

    def can_view(self, user):
        """Check if user has permission to view this blog."""
        if self.visibility == "PUBLIC":
            return True

        if user is None or not user.is_authenticated:
            return False

        if user.pk == self.author_id:
            return True

        if self.visibility == "FOLLOWERS":
            return self.author.followers.filter(follower=user).exists()

        return False

    def clean_images(self):
        """Raise ValidationError if the image count is out of bounds."""
        self._check_image_count(self.images.count())

    @staticmethod
    def _check_image_count(count):
        low = blog_settings.BLOG_MIN_IMAGES
        high = blog_settings.BLOG_MAX_IMAGES
        if count < low or count > high:
            raise ValidationError(
                f"A blog must have between {low} and {high} images (got {count})."
            )

    @transaction.atomic
    def set_images(self, urls):
        """Replace all images of this blog with `urls`, in order."""
        urls = list(urls)
        self._check_image_count(len(urls))
        self.images.all().delete()
        images = [
            BlogImage.objects.create(blog=self, url=url, order=index)
            for index, url in enumerate(urls)
        ]
        if not self.featured_image:
            self.featured_image = urls[0]
            self.save(update_fields=["featured_image", "updated_at"])
        return images

    def set_tags(self, names):
        """Attach tags by name, creating missing tags."""
        tags = []
        for name in names:
            name = name.strip()
            if not name:
                continue
            tag, _ = Tag.objects.get_or_create(name=name)
            tags.append(tag)
        self.tags.set(tags)
        return tags

    @property
    def like_count(self):
        return self.likes.count()

    @property
    def favorite_count(self):
        return self.favorites.count()

    @property
    def comment_count(self):
        return self.comments.count()


class BlogImage(models.Model):
    """Image attached to a blog."""

    blog = models.ForeignKey(
        Blog,
        on_delete=models.CASCADE,
        related_name="images",
    )
    url = models.URLField(max_length=500)
    order = models.PositiveSmallIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["order", "created_at"]
        verbose_name = "Blog Image"

    def __str__(self):
        return f"{self.blog} #{self.order}"

    def save(self, *args, **kwargs):
        if self._state.adding:
            existing = BlogImage.objects.filter(blog_id=self.blog_id).count()
            if existing >= blog_settings.BLOG_MAX_IMAGES:
                raise ValidationError(
                    f"A blog cannot have more than {blog_settings.BLOG_MAX_IMAGES} images."
                )
        super().save(*args, **kwargs)


class BlogTag(models.Model):
    """Join row between blogs and tags."""

    blog = models.ForeignKey(Blog, on_delete=models.CASCADE)
    tag = models.ForeignKey(Tag, on_delete=models.CASCADE)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["blog", "tag"], name="unique_blog_tag"),
        ]
        verbose_name = "Blog Tag"

    def __str__(self):
        return f"{self.blog} - {self.tag}"
