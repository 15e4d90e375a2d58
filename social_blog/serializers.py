"""
JSON representations of social_blog models.

Keys are camelCase to match the API consumed by browser clients.
"""


def serialize_profile(profile):
    if profile is None:
        return None
    return {
        "id": profile.pk,
        "bio": profile.bio,
        "pfp": profile.pfp,
        "birthdate": profile.birthdate.isoformat() if profile.birthdate else None,
        "website": profile.website,
    }


def serialize_user(user):
    """Return the public record for a user, including the nested profile."""
    return {
        "id": user.pk,
        "email": user.email,
        "username": user.username,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "location": user.location,
        "about": user.about,
        "isVerified": user.is_verified,
        "profile": serialize_profile(user.get_profile()),
    }


def serialize_comment(comment):
    return {
        "id": comment.pk,
        "content": comment.content,
        "user": comment.user.username,
        "createdAt": comment.created_at.isoformat(),
    }
