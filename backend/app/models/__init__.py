from app.models.guild import Guild, LootSystem, DEFAULT_PARTICIPATION_THRESHOLD
from app.models.user import User, UserRole
from app.models.wishlist import WishlistEntry, GearSlot
from app.models.loot import (
    LootSession, LootClaim, LootHistory,
    LootCategory, LootRarity, ClaimKind, LootMethod,
)
from app.models.notification import Notification

__all__ = [
    "Guild",
    "LootSystem",
    "DEFAULT_PARTICIPATION_THRESHOLD",
    "User",
    "UserRole",
    "WishlistEntry",
    "GearSlot",
    # Loot
    "LootSession",
    "LootClaim",
    "LootHistory",
    "LootCategory",
    "LootRarity",
    "ClaimKind",
    "LootMethod",
    "Notification",
]
