from fastapi import HTTPException, status

from app.models.user import User, UserRole


def check_role(user: User, required_role: UserRole) -> bool:
    """Hilfsfunktion: Prüft ob der Benutzer die erforderliche Rolle hat."""
    if not user.has_permission(required_role):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Diese Aktion erfordert mindestens die Rolle: {required_role.value}"
        )
    return True


def check_guild_member(user: User) -> int:
    """Prüft ob der Benutzer einer Gilde angehört und gibt deren ID zurück."""
    if user.guild_id is None or not user.has_permission(UserRole.MEMBER):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Keine aktive Gilde"
        )
    return user.guild_id


def is_officer(user: User, guild_id: int) -> bool:
    """Offizier oder Admin der angegebenen Gilde?"""
    return user.guild_id == guild_id and user.has_permission(UserRole.OFFICER)
