from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from app.models.guild import LootSystem
from app.models.loot import LootCategory, LootRarity, ClaimKind, LootMethod
from app.schemas.user import MemberBrief


class LootSessionCreate(BaseModel):
    item_name: str
    category: LootCategory = LootCategory.GUILD_RAID
    activate: bool = False  # Direkt öffnen statt in die Warteschlange
    custom_name: Optional[str] = None
    custom_traits: List[str] = []
    rarity: Optional[LootRarity] = None
    image_url: Optional[str] = None


class LootSessionResponse(BaseModel):
    id: int
    guild_id: int
    item_name: str
    category: LootCategory
    is_active: bool
    custom_name: Optional[str] = None
    custom_traits: Optional[List[str]] = None
    rarity: Optional[LootRarity] = None
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    claim_count: int = 0  # Relevante Claims im aktuellen Modus

    class Config:
        from_attributes = True


class TraitAdd(BaseModel):
    trait: str


class ClaimCreate(BaseModel):
    """Anfrage oder Wurf. roll_value 0 = Anfrage, ohne Wert würfelt der Server."""
    kind: Optional[ClaimKind] = None
    roll_value: Optional[int] = Field(default=None, ge=0, le=99)


class ClaimResponse(BaseModel):
    id: int
    session_id: int
    user: MemberBrief
    kind: ClaimKind
    roll_value: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CandidateResponse(BaseModel):
    rank: int  # 1 = empfohlen
    user_id: int
    name: str
    loot_received_count: int
    participation_points: int
    item_priority: Optional[int] = None
    slot_name: Optional[str] = None
    roll_value: Optional[int] = None
    claimed_at: Optional[datetime] = None


class CandidateListResponse(BaseModel):
    session_id: int
    item_name: str
    loot_system: LootSystem
    is_brocante: bool
    recommended_user_id: Optional[int] = None
    candidates: List[CandidateResponse]


class SpinRequest(BaseModel):
    candidate_ids: List[int]


class SpinResponse(BaseModel):
    """Ergebnis eines Drehs - wird nicht gespeichert."""
    winner_user_id: int
    winner_name: str
    pool_size: int


class AwardRequest(BaseModel):
    winner_id: int
    method: Optional[LootMethod] = None  # Standard: Modus der Gilde bzw. brocante


class RoulettePoolRequest(BaseModel):
    """Anwesende Mitglieder, unter denen das Glücksrad ein Item verlost."""
    item_name: str
    member_ids: List[int]


class RouletteAwardRequest(BaseModel):
    item_name: str
    winner_id: int


class AwardResponse(BaseModel):
    session_id: Optional[int] = None
    item_name: str
    winner_id: int
    winner_name: str
    method: LootMethod
    loot_received_count: int
    history_recorded: bool
    notified: bool
    message: str


class LootHistoryResponse(BaseModel):
    id: int
    item_name: str
    user: MemberBrief
    loot_method: LootMethod
    session_id: Optional[int] = None
    awarded_by_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
