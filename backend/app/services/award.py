"""
Vergabe eines Loots an genau einen Gewinner.

Der Festschreibe-Punkt ist das bedingte Schließen der Session
(``UPDATE ... SET awarded_at WHERE is_active``). Nur wer dabei eine Zeile
trifft, darf weitermachen - alle anderen bekommen ``AlreadyAwarded``. Die
geschlossene Zeile bleibt stehen und belegt die Vergabe. Zähler, Session und
Claims werden in derselben Transaktion geändert. Verlauf und
Benachrichtigung folgen danach und dürfen fehlschlagen.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.auth.dependencies import is_officer
from app.models.guild import Guild, LootSystem
from app.models.loot import LootSession, LootClaim, LootHistory, LootMethod
from app.models.user import User
from app.services.errors import (
    LootError, ValidationError, PermissionDenied, NotFound, AlreadyAwarded, DependencyFailure,
)
from app.services.notifications import notify, append_history, LOOT_ASSIGNED_MESSAGE

logger = logging.getLogger(__name__)


@dataclass
class AwardReceipt:
    """Ergebnis einer erfolgreichen Vergabe."""
    item_name: str
    guild_id: Optional[int]
    winner_id: int
    winner_name: str
    method: LootMethod
    loot_received_count: int
    awarded_by_id: int
    session_id: Optional[int] = None
    history_recorded: bool = False
    notified: bool = False


def default_method(policy: LootSystem, is_brocante: bool) -> LootMethod:
    """Methode für den Verlauf, wenn der Offizier keine angibt."""
    if is_brocante:
        return LootMethod.BROCANTE
    return LootMethod(policy.value)


class LootAwardService:
    """Service für die Loot-Vergabe."""

    def __init__(self, db: Session):
        self.db = db

    def award(
        self,
        session_id: int,
        winner_id: int,
        officer: User,
        method: Optional[LootMethod] = None,
    ) -> AwardReceipt:
        """Vergibt eine geöffnete Session an ``winner_id``.

        Wirft ``PermissionDenied``, ``NotFound``, ``AlreadyAwarded`` oder
        ``DependencyFailure``; in allen Fällen bleibt der Datenbestand
        unverändert.
        """
        db = self.db

        session = db.query(LootSession).filter(LootSession.id == session_id).first()
        if not session:
            raise NotFound()
        if not is_officer(officer, session.guild_id):
            raise PermissionDenied()
        if session.is_awarded:
            raise AlreadyAwarded()
        if not session.is_active:
            raise NotFound("Loot-Session ist nicht geöffnet")

        guild_id = session.guild_id
        item_name = session.item_name
        guild = db.query(Guild).filter(Guild.id == guild_id).first()
        policy = guild.loot_system if guild else LootSystem.COUNCIL
        if method is None:
            method = default_method(policy, session.is_brocante)

        winner = db.query(User).filter(User.id == winner_id).first()
        if not winner or winner.guild_id != guild_id:
            raise NotFound("Gewinner ist kein Mitglied dieser Gilde")
        winner_name = winner.name

        has_claim = db.query(LootClaim.id).filter(
            LootClaim.session_id == session_id,
            LootClaim.user_id == winner_id,
        ).first() is not None
        if not has_claim:
            logger.warning(
                "Session %s wird an %s vergeben, der keinen Claim abgegeben hat (Offizier %s)",
                session_id, winner_id, officer.id,
            )

        try:
            closed = db.query(LootSession).filter(
                LootSession.id == session_id,
                LootSession.is_active == True,
                LootSession.awarded_at.is_(None),
            ).update({
                LootSession.is_active: False,
                LootSession.awarded_at: datetime.now(timezone.utc),
                LootSession.awarded_to_id: winner_id,
            }, synchronize_session=False)

            if closed == 1:
                bumped = db.query(User).filter(User.id == winner_id).update(
                    {User.loot_received_count: User.loot_received_count + 1},
                    synchronize_session=False,
                )
                if bumped != 1:
                    db.rollback()
                    raise NotFound("Gewinner nicht gefunden")
                # Auch Claims gleichen Namens, damit alte Würfe bei einer neuen Session nicht wieder auftauchen
                purged = db.query(LootClaim).filter(or_(
                    LootClaim.session_id == session_id,
                    and_(LootClaim.guild_id == guild_id, LootClaim.item_name == item_name),
                )).delete(synchronize_session=False)
                db.commit()
            else:
                db.rollback()
        except LootError:
            raise
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Vergabe von Session %s an %s fehlgeschlagen", session_id, winner_id)
            raise DependencyFailure() from exc

        if closed != 1:
            if self._was_awarded(session_id):
                logger.info("Session %s wurde bereits vergeben (Offizier %s zu spät)", session_id, officer.id)
                raise AlreadyAwarded()
            # Zwischenzeitlich abgebrochen
            raise NotFound()

        db.refresh(winner)
        logger.info(
            "Loot vergeben: %s an %s (%s) von %s, %d Claims entfernt",
            item_name, winner_id, method.value, officer.id, purged,
        )

        receipt = AwardReceipt(
            session_id=session_id,
            item_name=item_name,
            guild_id=guild_id,
            winner_id=winner_id,
            winner_name=winner_name,
            method=method,
            loot_received_count=winner.loot_received_count,
            awarded_by_id=officer.id,
        )
        self._after_commit(receipt)
        return receipt

    def award_roulette(
        self,
        item_name: str,
        winner_id: int,
        officer: User,
    ) -> AwardReceipt:
        """Hält das Ergebnis eines Raid-Glücksrads ohne Session fest.

        Zähler und Verlauf werden gemeinsam geschrieben, die Benachrichtigung
        danach.
        """
        db = self.db
        item_name = (item_name or "").strip()
        if not item_name:
            raise ValidationError("Item-Name darf nicht leer sein")
        guild_id = officer.guild_id
        if guild_id is None or not is_officer(officer, guild_id):
            raise PermissionDenied()

        winner = db.query(User).filter(User.id == winner_id).first()
        if not winner or winner.guild_id != guild_id:
            raise NotFound("Gewinner ist kein Mitglied dieser Gilde")
        winner_name = winner.name

        try:
            db.query(User).filter(User.id == winner_id).update(
                {User.loot_received_count: User.loot_received_count + 1},
                synchronize_session=False,
            )
            db.add(LootHistory(
                item_name=item_name,
                user_id=winner_id,
                guild_id=guild_id,
                loot_method=LootMethod.ROULETTE,
                awarded_by_id=officer.id,
            ))
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Glücksrad-Ergebnis für %s konnte nicht gespeichert werden", item_name)
            raise DependencyFailure() from exc

        db.refresh(winner)
        logger.info("Glücksrad: %s an %s von %s", item_name, winner_id, officer.id)

        receipt = AwardReceipt(
            item_name=item_name,
            guild_id=guild_id,
            winner_id=winner_id,
            winner_name=winner_name,
            method=LootMethod.ROULETTE,
            loot_received_count=winner.loot_received_count,
            awarded_by_id=officer.id,
            history_recorded=True,
        )
        receipt.notified = self._notify_winner(receipt)
        return receipt

    def _was_awarded(self, session_id: int) -> bool:
        """Liest den festgeschriebenen Stand, nicht die Kopie in der Identity-Map."""
        awarded_at = self.db.query(LootSession.awarded_at).filter(LootSession.id == session_id).scalar()
        return awarded_at is not None

    def _after_commit(self, receipt: AwardReceipt) -> None:
        """Verlauf und Benachrichtigung - Fehler werden nur geloggt."""
        entry = append_history(
            self.db,
            item_name=receipt.item_name,
            user_id=receipt.winner_id,
            guild_id=receipt.guild_id,
            method=receipt.method,
            session_id=receipt.session_id,
            awarded_by_id=receipt.awarded_by_id,
        )
        receipt.history_recorded = entry is not None
        receipt.notified = self._notify_winner(receipt)
        if not receipt.history_recorded:
            logger.warning("Vergabe von %s ohne Verlaufseintrag", receipt.item_name)

    def _notify_winner(self, receipt: AwardReceipt) -> bool:
        notification = notify(
            self.db,
            receipt.winner_id,
            "loot_assigned",
            LOOT_ASSIGNED_MESSAGE.format(item_name=receipt.item_name),
            guild_id=receipt.guild_id,
        )
        return notification is not None
