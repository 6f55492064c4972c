"""
Claims (Anfragen und Würfe) auf Loot-Sessions.
"""

import logging
import random
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.database import dialect_insert
from app.models.guild import LootSystem
from app.models.loot import LootClaim, ClaimKind
from app.models.user import User
from app.services.eligibility import check_claim_eligibility
from app.services.errors import ValidationError, PermissionDenied, NotFound
from app.services.notifications import notify
from app.services.sessions import get_active_session, get_session, get_guild, ensure_officer

logger = logging.getLogger(__name__)

ROLL_MIN = 1
ROLL_MAX = 99


def resolve_claim_kind(
    kind: Optional[ClaimKind],
    roll_value: Optional[int],
    is_brocante: bool,
    policy: LootSystem,
    rng: Optional[random.Random] = None,
) -> tuple[ClaimKind, Optional[int]]:
    """Bestimmt Art und Wurf eines neuen Claims.

    ``roll_value == 0`` ist die alte Schreibweise für eine Anfrage. Ein
    Wurf ohne Wert wird serverseitig gewürfelt. Brocante kennt nur Anfragen.
    """
    if is_brocante:
        return ClaimKind.REQUEST, None

    if roll_value == 0:
        if kind == ClaimKind.ROLL:
            raise ValidationError(f"Wurf muss zwischen {ROLL_MIN} und {ROLL_MAX} liegen")
        return ClaimKind.REQUEST, None

    if kind is None:
        if roll_value is not None:
            kind = ClaimKind.ROLL
        else:
            kind = ClaimKind.ROLL if policy == LootSystem.ROLL else ClaimKind.REQUEST

    if kind == ClaimKind.REQUEST:
        if roll_value is not None:
            raise ValidationError("Eine Anfrage hat keinen Wurf")
        return ClaimKind.REQUEST, None

    if roll_value is None:
        roll_value = (rng or random).randint(ROLL_MIN, ROLL_MAX)
    if not ROLL_MIN <= roll_value <= ROLL_MAX:
        raise ValidationError(f"Wurf muss zwischen {ROLL_MIN} und {ROLL_MAX} liegen")
    return ClaimKind.ROLL, roll_value


def submit_claim(
    db: Session,
    session_id: int,
    member: User,
    roll_value: Optional[int] = None,
    kind: Optional[ClaimKind] = None,
    rng: Optional[random.Random] = None,
) -> LootClaim:
    """Gibt einen Claim ab.

    Pro Mitglied und Session gibt es genau einen Claim: ein zweiter Versuch
    ändert nichts und liefert den bestehenden Claim zurück (kein Neu-Würfeln).
    """
    session = get_active_session(db, session_id)
    if member.guild_id != session.guild_id:
        raise PermissionDenied("Kein Mitglied dieser Gilde")

    check_claim_eligibility(db, session, member)

    policy = get_guild(db, session.guild_id).loot_system
    kind, roll_value = resolve_claim_kind(kind, roll_value, session.is_brocante, policy, rng)

    insert = dialect_insert(db)
    stmt = insert(LootClaim).values(
        session_id=session.id,
        user_id=member.id,
        guild_id=session.guild_id,
        item_name=session.item_name,
        kind=kind,
        roll_value=roll_value,
        created_at=datetime.now(timezone.utc),
    ).on_conflict_do_nothing(index_elements=["session_id", "user_id"])
    try:
        result = db.execute(stmt)
        db.commit()
    except IntegrityError:
        # Session wurde zwischenzeitlich vergeben oder abgebrochen
        db.rollback()
        raise NotFound("Loot-Session ist nicht geöffnet")

    if result.rowcount == 0:
        logger.info("Claim von %s auf Session %s existiert bereits", member.id, session.id)

    return db.query(LootClaim).filter(
        LootClaim.session_id == session.id,
        LootClaim.user_id == member.id,
    ).one()


def list_claims(db: Session, session_id: int, viewer: User) -> List[LootClaim]:
    """Alle Claims einer Session, höchster Wurf zuerst."""
    session = get_session(db, session_id)
    if viewer.guild_id != session.guild_id:
        raise PermissionDenied("Kein Mitglied dieser Gilde")
    claims = db.query(LootClaim).filter(LootClaim.session_id == session.id).all()
    return sorted(claims, key=lambda c: (-(c.roll_value or 0), c.id))


def refuse_claim(
    db: Session,
    officer: User,
    session_id: int,
    user_id: int,
    reason: Optional[str] = None,
) -> None:
    """Lehnt einen einzelnen Claim ab. Die Session bleibt geöffnet."""
    session = get_session(db, session_id)
    ensure_officer(officer, session.guild_id)

    deleted = db.query(LootClaim).filter(
        LootClaim.session_id == session.id,
        LootClaim.user_id == user_id,
    ).delete(synchronize_session=False)
    if not deleted:
        db.rollback()
        raise NotFound("Claim nicht gefunden")
    db.commit()
    logger.info("Claim von %s auf Session %s abgelehnt von %s", user_id, session.id, officer.id)

    message = "Deine Loot-Anfrage wurde abgelehnt."
    if reason:
        message += f" Grund: {reason}"
    notify(db, user_id, "loot_refused", message, guild_id=session.guild_id)
