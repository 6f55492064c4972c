from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, ForeignKey, Enum, JSON, Index,
    UniqueConstraint, CheckConstraint, text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
import enum


class LootCategory(str, enum.Enum):
    GUILD_RAID = "guild_raid"  # Raid-Loot mit Wishlist- und Punkte-Prüfung
    BROCANTE = "brocante"      # Brocante: frei für alle, wer zuerst kommt


class LootRarity(str, enum.Enum):
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"


class ClaimKind(str, enum.Enum):
    REQUEST = "request"  # Einfache Anfrage (Loot-Rat / FCFS / Brocante)
    ROLL = "roll"        # Würfelwurf 1-99


class LootMethod(str, enum.Enum):
    ROLL = "roll"
    ROULETTE = "roulette"
    COUNCIL = "council"
    FCFS = "fcfs"
    BROCANTE = "brocante"


class LootSession(Base):
    """Ein Item, das gerade zur Verteilung steht.

    Beim Vergeben bleibt die Zeile geschlossen stehen (`awarded_at`), beim
    Abbrechen wird sie gelöscht. IDs werden nie wiederverwendet. Pro Gilde und
    Item darf höchstens eine aktive Session existieren.
    """
    __tablename__ = "loot_sessions"
    __table_args__ = (
        Index(
            "uq_loot_sessions_active_item",
            "guild_id", "item_name",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
        {"sqlite_autoincrement": True},
    )

    id = Column(Integer, primary_key=True, index=True)
    guild_id = Column(Integer, ForeignKey("guilds.id"), nullable=False, index=True)
    item_name = Column(String(200), nullable=False)
    category = Column(Enum(LootCategory), default=LootCategory.GUILD_RAID, nullable=False)
    is_active = Column(Boolean, default=False, nullable=False)  # False = in der Warteschlange

    # Optionale Anzeige-Overrides (v.a. Brocante)
    custom_name = Column(String(200), nullable=True)
    custom_traits = Column(JSON, nullable=True)  # Liste von Trait-Namen
    rarity = Column(Enum(LootRarity), nullable=True)
    image_url = Column(String(500), nullable=True)

    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Gesetzt beim Vergeben - die Session ist dann endgültig geschlossen
    awarded_at = Column(DateTime(timezone=True), nullable=True)
    awarded_to_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    # Relationships
    created_by = relationship("User", foreign_keys=[created_by_id])
    awarded_to = relationship("User", foreign_keys=[awarded_to_id])
    claims = relationship("LootClaim", back_populates="session", passive_deletes=True)

    @property
    def is_brocante(self) -> bool:
        return self.category == LootCategory.BROCANTE

    @property
    def is_awarded(self) -> bool:
        return self.awarded_at is not None


class LootClaim(Base):
    """Anfrage oder Würfelwurf eines Mitglieds auf eine Session.

    Höchstens ein Eintrag pro Mitglied und Session (Upsert).
    """
    __tablename__ = "loot_claims"
    __table_args__ = (
        UniqueConstraint("session_id", "user_id", name="uq_loot_claims_session_user"),
        CheckConstraint(
            "(kind = 'REQUEST' AND roll_value IS NULL) OR "
            "(kind = 'ROLL' AND roll_value BETWEEN 1 AND 99)",
            name="ck_loot_claims_roll_value",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("loot_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    guild_id = Column(Integer, ForeignKey("guilds.id"), nullable=False)
    item_name = Column(String(200), nullable=False, index=True)  # Für das Aufräumen gleichnamiger Claims
    kind = Column(Enum(ClaimKind), nullable=False)
    roll_value = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    session = relationship("LootSession", back_populates="claims")
    user = relationship("User")


class LootHistory(Base):
    """Unveränderliches Protokoll vergebener Loots."""
    __tablename__ = "loot_history"

    id = Column(Integer, primary_key=True, index=True)
    guild_id = Column(Integer, ForeignKey("guilds.id"), nullable=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    item_name = Column(String(200), nullable=False)
    loot_method = Column(Enum(LootMethod), nullable=False)
    session_id = Column(Integer, nullable=True)  # Leer beim Raid-Glücksrad ohne Session
    awarded_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", foreign_keys=[user_id])
    awarded_by = relationship("User", foreign_keys=[awarded_by_id])
