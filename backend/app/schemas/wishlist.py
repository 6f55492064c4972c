from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

from app.models.wishlist import GearSlot


class WishlistEntryUpsert(BaseModel):
    slot_name: GearSlot
    item_name: str
    item_priority: int = Field(default=1, ge=1)


class WishlistEntryResponse(BaseModel):
    id: int
    slot_name: GearSlot
    item_name: str
    item_priority: int
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
