from sqlalchemy import Column, Integer, String, Enum, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
import enum


class UserRole(str, enum.Enum):
    """Mitglieder-Rollen mit aufsteigenden Berechtigungen."""
    GUEST = "guest"        # Wartet auf Aufnahme in die Gilde
    MEMBER = "member"      # Kann Loot anfragen und rollen
    OFFICER = "officer"    # Kann Loot-Sessions öffnen und verteilen
    ADMIN = "admin"        # Alles, inkl. Gilden-Einstellungen


class User(Base):
    """Gildenmitglied mit Teilnahmepunkten und Loot-Zähler."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), nullable=False)
    display_name = Column(String(100), nullable=True)  # Ingame-Name
    role = Column(Enum(UserRole), default=UserRole.MEMBER, nullable=False)
    guild_id = Column(Integer, ForeignKey("guilds.id"), nullable=True, index=True)

    # Teilnahmepunkte (Raids, Events) - Voraussetzung für Raid-Loot
    participation_points = Column(Integer, default=0, nullable=False)
    # Anzahl erhaltener Loots - wird nur über die Loot-Verteilung erhöht
    loot_received_count = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    guild = relationship("Guild", back_populates="members")
    wishlist = relationship("WishlistEntry", back_populates="user", cascade="all, delete-orphan")

    @property
    def name(self) -> str:
        return self.display_name or self.username

    def has_permission(self, required_role: UserRole) -> bool:
        """Prüft ob der Benutzer mindestens die angegebene Rolle hat."""
        role_hierarchy = {
            UserRole.GUEST: 0,
            UserRole.MEMBER: 1,
            UserRole.OFFICER: 2,
            UserRole.ADMIN: 3,
        }
        return role_hierarchy[self.role] >= role_hierarchy[required_role]
