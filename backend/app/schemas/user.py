from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from app.models.user import UserRole


class MemberBrief(BaseModel):
    """Kurzform eines Mitglieds für Listen."""
    id: int
    username: str
    display_name: Optional[str] = None

    class Config:
        from_attributes = True


class UserResponse(MemberBrief):
    role: UserRole
    guild_id: Optional[int] = None
    participation_points: int = 0
    loot_received_count: int = 0
    created_at: Optional[datetime] = None


class ParticipationPointsUpdate(BaseModel):
    """Punkte-Korrektur durch einen Offizier (positiv oder negativ)."""
    delta: int
