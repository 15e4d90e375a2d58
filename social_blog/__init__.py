"""
django-social-blog - A Django app for a small blogging/social platform.

Features:
- Custom user model with lazily created profiles
- Blog posts with images (1-5 per post), tags and visibility levels
- Comments, likes, favorites and follows
- E-mail verification and password reset tokens
- Profile editing workflow with optimistic image upload
"""

__version__ = "0.1.0"
__author__ = "Nestor Wheelock"
