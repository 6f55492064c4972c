"""
Nachgelagerte, optionale Effekte einer Loot-Vergabe: Verlauf und
Benachrichtigungen.

Fehler werden geloggt und nicht weitergereicht - die Vergabe selbst ist zu
diesem Zeitpunkt bereits festgeschrieben.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.loot import LootHistory, LootMethod
from app.models.notification import Notification

logger = logging.getLogger(__name__)

LOOT_ASSIGNED_MESSAGE = (
    "Glückwunsch, du hast {item_name} gewonnen! Du erhältst das Item in Kürze im Spiel."
)


def notify(
    db: Session,
    user_id: int,
    type: str,
    message: str,
    guild_id: Optional[int] = None,
) -> Optional[Notification]:
    """Legt eine Benachrichtigung an. Gibt None zurück, wenn das nicht klappt."""
    notification = Notification(
        user_id=user_id,
        guild_id=guild_id,
        type=type,
        message=message,
        is_read=False,
    )
    try:
        db.add(notification)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Benachrichtigung für %s (%s) konnte nicht gespeichert werden", user_id, type)
        return None
    return notification


def append_history(
    db: Session,
    item_name: str,
    user_id: int,
    guild_id: Optional[int],
    method: LootMethod,
    session_id: Optional[int] = None,
    awarded_by_id: Optional[int] = None,
) -> Optional[LootHistory]:
    """Schreibt einen Eintrag in den Loot-Verlauf. Gibt None zurück, wenn das nicht klappt."""
    entry = LootHistory(
        item_name=item_name,
        user_id=user_id,
        guild_id=guild_id,
        loot_method=method,
        session_id=session_id,
        awarded_by_id=awarded_by_id,
    )
    try:
        db.add(entry)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Loot-Verlauf für %s (%s) konnte nicht gespeichert werden", item_name, user_id)
        return None
    return entry
