from app.db.models.database import User


def display_name(user: User) -> str:
    full = " ".join(part for part in (user.first_name, user.last_name) if part)
    return full or user.username


def user_brief(user: User | None) -> dict | None:
    if user is None:
        return None
    return {
        "id": user.id,
        "username": user.username,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "avatar": user.avatar,
    }


def public_user(user: User) -> dict:
    """Shape returned next to an auth token."""
    return {
        "id": user.id,
        "username": user.username,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "english_level": user.english_level,
        "avatar": user.avatar,
        "coins": user.coins,
        "is_premium": user.is_premium,
        "is_teacher": user.is_teacher,
        "is_admin": user.is_admin,
    }


def user_detail(user: User) -> dict:
    """Full record minus the password hash."""
    return {
        **public_user(user),
        "email": user.email,
        "age": user.age,
        "bio": user.bio,
        "rating": user.rating,
        "is_active": user.is_active,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }
