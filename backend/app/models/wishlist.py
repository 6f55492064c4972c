from sqlalchemy import Column, Integer, String, Enum, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
import enum


class GearSlot(str, enum.Enum):
    MAIN_HAND = "main_hand"
    OFF_HAND = "off_hand"
    HEAD = "head"
    CHEST = "chest"
    GLOVES = "gloves"
    LEGS = "legs"
    FEET = "feet"
    CLOAK = "cloak"
    NECKLACE = "necklace"
    BRACELET = "bracelet"
    RING1 = "ring1"
    RING2 = "ring2"
    BELT = "belt"


class WishlistEntry(Base):
    """Wunsch-Item eines Mitglieds für einen Ausrüstungsplatz (Priorität 1 = höchste)."""
    __tablename__ = "wishlist_entries"
    __table_args__ = (
        UniqueConstraint("user_id", "slot_name", "item_priority", name="uq_wishlist_user_slot_priority"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    slot_name = Column(Enum(GearSlot), nullable=False)
    item_name = Column(String(200), nullable=False, index=True)
    item_priority = Column(Integer, default=1, nullable=False)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="wishlist")
