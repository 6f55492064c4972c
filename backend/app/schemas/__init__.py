from app.schemas.user import MemberBrief, UserResponse
from app.schemas.guild import GuildSettingsResponse, GuildSettingsUpdate
from app.schemas.wishlist import WishlistEntryUpsert, WishlistEntryResponse
from app.schemas.notification import NotificationResponse
from app.schemas.loot import (
    LootSessionCreate, LootSessionResponse, ClaimCreate, ClaimResponse,
    CandidateListResponse, SpinRequest, SpinResponse, AwardRequest, AwardResponse,
)

__all__ = [
    "MemberBrief", "UserResponse",
    "GuildSettingsResponse", "GuildSettingsUpdate",
    "WishlistEntryUpsert", "WishlistEntryResponse",
    "NotificationResponse",
    "LootSessionCreate", "LootSessionResponse", "ClaimCreate", "ClaimResponse",
    "CandidateListResponse", "SpinRequest", "SpinResponse", "AwardRequest", "AwardResponse",
]
