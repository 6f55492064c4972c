"""
Loot-Session-Verwaltung: Warteschlange, Öffnen, Abbrechen und Abfragen.
"""

import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.auth.dependencies import is_officer
from app.models.guild import Guild, LootSystem
from app.models.loot import LootSession, LootClaim, LootCategory, LootRarity, ClaimKind
from app.models.user import User
from app.services.errors import (
    ValidationError, PermissionDenied, NotFound, AlreadyAwarded, DuplicateActiveSession,
)

logger = logging.getLogger(__name__)

DEFAULT_BROCANTE_RARITY = LootRarity.RARE


def get_guild(db: Session, guild_id: int) -> Guild:
    guild = db.query(Guild).filter(Guild.id == guild_id).first()
    if not guild:
        raise NotFound("Gilde nicht gefunden")
    return guild


def get_session(db: Session, session_id: int, include_awarded: bool = False) -> LootSession:
    """Gibt eine Session zurück, egal ob aktiv oder in der Warteschlange.

    Vergebene Sessions gelten als nicht vorhanden, außer mit ``include_awarded``.
    """
    session = db.query(LootSession).filter(LootSession.id == session_id).first()
    if not session or (session.is_awarded and not include_awarded):
        raise NotFound()
    return session


def get_active_session(db: Session, session_id: int) -> LootSession:
    """Gibt eine geöffnete Session zurück - sonst NotFound."""
    session = get_session(db, session_id)
    if not session.is_active:
        raise NotFound("Loot-Session ist nicht geöffnet")
    return session


def is_relevant_claim(kind: ClaimKind, is_brocante: bool, policy: LootSystem) -> bool:
    """Zählt der Claim im aktuellen Modus? Roll wertet nur Würfe, Loot-Rat und FCFS nur Anfragen."""
    if is_brocante:
        return True
    if policy == LootSystem.ROLL:
        return kind == ClaimKind.ROLL
    return kind == ClaimKind.REQUEST


def ensure_officer(user: User, guild_id: int) -> None:
    if not is_officer(user, guild_id):
        raise PermissionDenied()


def open_session(
    db: Session,
    officer: User,
    item_name: str,
    category: LootCategory = LootCategory.GUILD_RAID,
    activate: bool = False,
    custom_name: Optional[str] = None,
    custom_traits: Optional[List[str]] = None,
    rarity: Optional[LootRarity] = None,
    image_url: Optional[str] = None,
) -> LootSession:
    """Legt eine Session an.

    Ohne ``activate`` landet das Item in der Warteschlange und muss später
    mit ``activate_session`` geöffnet werden. Brocante-Items bekommen eine
    Standard-Seltenheit, wenn keine angegeben ist.
    """
    item_name = (item_name or "").strip()
    if not item_name:
        raise ValidationError("Item-Name darf nicht leer sein")
    if officer.guild_id is None:
        raise ValidationError("Keine aktive Gilde")
    ensure_officer(officer, officer.guild_id)

    if category == LootCategory.BROCANTE and rarity is None:
        rarity = DEFAULT_BROCANTE_RARITY

    session = LootSession(
        guild_id=officer.guild_id,
        item_name=item_name,
        category=category,
        is_active=activate,
        custom_name=custom_name,
        custom_traits=list(custom_traits) if custom_traits else [],
        rarity=rarity,
        image_url=image_url,
        created_by_id=officer.id,
    )
    db.add(session)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateActiveSession()
    db.refresh(session)
    logger.info(
        "Loot-Session %s angelegt: %s (%s, aktiv=%s) von %s",
        session.id, item_name, category.value, activate, officer.id,
    )
    return session


def activate_session(db: Session, officer: User, session_id: int) -> LootSession:
    """Öffnet eine Session aus der Warteschlange für Claims."""
    session = get_session(db, session_id)
    ensure_officer(officer, session.guild_id)
    if session.is_active:
        return session

    session.is_active = True
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateActiveSession()
    db.refresh(session)
    logger.info("Loot-Session %s geöffnet von %s", session.id, officer.id)
    return session


def cancel_session(db: Session, officer: User, session_id: int) -> None:
    """Bricht eine Session ab: Session und Claims werden gelöscht, kein Zähler ändert sich.

    Eine inzwischen vergebene Session bleibt stehen (``AlreadyAwarded``).
    """
    session = get_session(db, session_id, include_awarded=True)
    ensure_officer(officer, session.guild_id)
    if session.is_awarded:
        raise AlreadyAwarded()

    db.query(LootClaim).filter(LootClaim.session_id == session_id).delete(synchronize_session=False)
    deleted = db.query(LootSession).filter(
        LootSession.id == session_id,
        LootSession.awarded_at.is_(None),
    ).delete(synchronize_session=False)
    if deleted != 1:
        db.rollback()
        if db.query(LootSession.id).filter(LootSession.id == session_id).scalar() is None:
            raise NotFound()
        raise AlreadyAwarded()
    db.expunge(session)
    db.commit()
    logger.info("Loot-Session %s abgebrochen von %s", session_id, officer.id)


def add_trait(db: Session, officer: User, session_id: int, trait: str) -> LootSession:
    """Hängt einen Trait an die Anzeige der Session an (ohne Duplikate)."""
    trait = (trait or "").strip()
    if not trait:
        raise ValidationError("Trait darf nicht leer sein")
    session = get_session(db, session_id)
    ensure_officer(officer, session.guild_id)

    existing = list(session.custom_traits or [])
    if trait not in existing:
        # JSON-Spalte neu zuweisen, damit die Änderung erkannt wird
        session.custom_traits = existing + [trait]
        db.commit()
        db.refresh(session)
    return session


def list_sessions(
    db: Session,
    guild_id: int,
    category: Optional[LootCategory] = None,
    active: Optional[bool] = None,
) -> List[LootSession]:
    query = db.query(LootSession).filter(LootSession.guild_id == guild_id, LootSession.awarded_at.is_(None))
    if category is not None:
        query = query.filter(LootSession.category == category)
    if active is not None:
        query = query.filter(LootSession.is_active == active)
    return query.order_by(LootSession.created_at.asc(), LootSession.id.asc()).all()


def claim_counts(db: Session, sessions: Iterable[LootSession], policy: LootSystem) -> Dict[int, int]:
    """Zählt die relevanten Claims pro Session.

    Brocante zählt jeden Claim, sonst entscheidet der Modus.
    """
    sessions = list(sessions)
    if not sessions:
        return {}
    brocante_ids = {s.id for s in sessions if s.is_brocante}
    rows = db.query(LootClaim.session_id, LootClaim.kind).filter(
        LootClaim.session_id.in_([s.id for s in sessions]),
    ).all()
    counts = Counter(
        row.session_id for row in rows
        if is_relevant_claim(row.kind, row.session_id in brocante_ids, policy)
    )
    return {s.id: counts.get(s.id, 0) for s in sessions}
