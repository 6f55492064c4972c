from sqlalchemy import Column, Integer, String, Enum, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
from app.config import get_settings
import enum


DEFAULT_PARTICIPATION_THRESHOLD = get_settings().default_participation_threshold


class LootSystem(str, enum.Enum):
    """Verteilungs-Modus der Gilde für Raid-Loot."""
    COUNCIL = "council"  # Loot-Rat: Wishlist-Priorität, dann Loot-Zähler
    ROLL = "roll"        # Würfeln 1-99
    FCFS = "fcfs"        # Wer zuerst anfragt - wird wie der Loot-Rat sortiert


class Guild(Base):
    """Gilde mit ihren Loot-Einstellungen."""
    __tablename__ = "guilds"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    loot_system = Column(Enum(LootSystem), default=LootSystem.COUNCIL, nullable=False)
    participation_threshold = Column(Integer, default=DEFAULT_PARTICIPATION_THRESHOLD, nullable=False)
    discord_webhook_url = Column(String(500), nullable=True)  # Ankündigung von Loot-Gewinnern

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    members = relationship("User", back_populates="guild")
