from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User, UserRole
from app.schemas.guild import GuildSettingsResponse, GuildSettingsUpdate
from app.auth.jwt import get_current_user
from app.auth.dependencies import check_role, check_guild_member
from app.services.sessions import get_guild

router = APIRouter()


@router.get("/settings", response_model=GuildSettingsResponse)
async def get_guild_settings(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Gibt die Loot-Einstellungen der eigenen Gilde zurück."""
    return get_guild(db, check_guild_member(current_user))


@router.patch("/settings", response_model=GuildSettingsResponse)
async def update_guild_settings(
    settings_update: GuildSettingsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Ändert Loot-Modus, Punkte-Schwelle oder Discord-Webhook. Nur Admins."""
    check_role(current_user, UserRole.ADMIN)
    guild = get_guild(db, check_guild_member(current_user))

    if settings_update.loot_system is not None:
        guild.loot_system = settings_update.loot_system
    if settings_update.participation_threshold is not None:
        guild.participation_threshold = settings_update.participation_threshold
    if settings_update.discord_webhook_url is not None:
        # Leerer String entfernt den Webhook
        guild.discord_webhook_url = settings_update.discord_webhook_url.strip() or None

    db.commit()
    db.refresh(guild)
    return guild
