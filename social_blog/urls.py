"""
URL configuration for django-social-blog.

Include in your project urls.py:

    path('', include('social_blog.urls')),
"""
from django.urls import path

from . import views

app_name = "social_blog"

urlpatterns = [
    # Uploads
    path("api/upload", views.ImageUploadView.as_view(), name="upload"),

    # Users
    path("api/users/<int:pk>/", views.UserDetailView.as_view(), name="user_detail"),
    path("api/users/<int:pk>/profile/", views.ProfileUpdateView.as_view(), name="profile_update"),
    path("api/users/<int:pk>/follow/", views.FollowToggleView.as_view(), name="follow_toggle"),

    # Blog interactions
    path("api/blogs/<int:pk>/like/", views.LikeToggleView.as_view(), name="like_toggle"),
    path("api/blogs/<int:pk>/favorite/", views.FavoriteToggleView.as_view(), name="favorite_toggle"),
    path("api/blogs/<int:pk>/comments/", views.CommentCreateView.as_view(), name="comment_create"),
]
