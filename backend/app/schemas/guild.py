from pydantic import BaseModel, Field
from typing import Optional

from app.models.guild import LootSystem


class GuildSettingsResponse(BaseModel):
    id: int
    name: str
    loot_system: LootSystem
    participation_threshold: int
    discord_webhook_url: Optional[str] = None

    class Config:
        from_attributes = True


class GuildSettingsUpdate(BaseModel):
    loot_system: Optional[LootSystem] = None
    participation_threshold: Optional[int] = Field(default=None, ge=0)
    discord_webhook_url: Optional[str] = None
