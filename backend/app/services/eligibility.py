"""
Berechtigungsprüfung für Loot-Claims und Ermittlung der Kandidaten.

Raid-Loot (guild_raid) verlangt das Item auf Wishlist-Priorität 1 und genug
Teilnahmepunkte. Brocante ist frei für alle.
"""

from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.models.guild import LootSystem
from app.models.loot import LootSession, LootClaim, ClaimKind
from app.models.user import User
from app.models.wishlist import WishlistEntry
from app.services.errors import NotEligible
from app.services.ranking import Candidate
from app.services.sessions import get_active_session, get_guild, is_relevant_claim


def wishlist_priorities(db: Session, item_name: str, user_ids: List[int]) -> Dict[int, Tuple[int, str]]:
    """Beste Wishlist-Priorität (und Slot) pro Mitglied für ein Item."""
    if not user_ids:
        return {}
    rows = db.query(WishlistEntry).filter(
        WishlistEntry.item_name == item_name,
        WishlistEntry.user_id.in_(user_ids),
    ).all()

    best: Dict[int, Tuple[int, str]] = {}
    for row in rows:
        current = best.get(row.user_id)
        if current is None or row.item_priority < current[0]:
            best[row.user_id] = (row.item_priority, row.slot_name.value)
    return best


def check_claim_eligibility(db: Session, session: LootSession, member: User) -> None:
    """Darf das Mitglied einen Claim auf die Session abgeben?

    Wirft ``NotEligible`` mit dem verletzten Kriterium. Die Wishlist wird
    vor den Punkten geprüft.
    """
    if session.is_brocante:
        return

    on_wishlist = db.query(WishlistEntry.id).filter(
        WishlistEntry.user_id == member.id,
        WishlistEntry.item_name == session.item_name,
        WishlistEntry.item_priority == 1,
    ).first() is not None
    if not on_wishlist:
        raise NotEligible(NotEligible.NOT_ON_WISHLIST)

    guild = get_guild(db, session.guild_id)
    if member.participation_points < guild.participation_threshold:
        raise NotEligible(
            NotEligible.INSUFFICIENT_PARTICIPATION,
            f"Nicht berechtigt: Mindestens {guild.participation_threshold} Teilnahmepunkte nötig",
        )


def compute_candidates(
    db: Session,
    session_id: int,
    policy: Optional[LootSystem] = None,
) -> List[Candidate]:
    """Kandidaten einer geöffneten Session, unsortiert.

    Ohne ``policy`` gilt der Modus der Gilde. Eine leere Liste heißt
    "nichts zu vergeben" und ist kein Fehler.
    """
    session = get_active_session(db, session_id)
    if policy is None:
        policy = get_guild(db, session.guild_id).loot_system

    rows = db.query(LootClaim, User).join(User, User.id == LootClaim.user_id).filter(
        LootClaim.session_id == session.id,
        User.guild_id == session.guild_id,
    ).all()
    rows = [(claim, user) for claim, user in rows if is_relevant_claim(claim.kind, session.is_brocante, policy)]

    priorities = wishlist_priorities(db, session.item_name, [user.id for _, user in rows])

    candidates = []
    for claim, user in rows:
        priority, slot_name = priorities.get(user.id, (None, None))
        candidates.append(Candidate(
            user_id=user.id,
            name=user.name,
            loot_received_count=user.loot_received_count or 0,
            participation_points=user.participation_points or 0,
            item_priority=priority,
            slot_name=slot_name,
            roll_value=claim.roll_value if claim.kind == ClaimKind.ROLL else None,
            claimed_at=claim.created_at,
        ))
    return candidates
