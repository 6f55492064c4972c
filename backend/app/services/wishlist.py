"""
Wishlist-Pflege: ein Item pro Mitglied, Slot und Priorität.
"""

from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.database import dialect_insert
from app.models.wishlist import WishlistEntry, GearSlot
from app.services.errors import ValidationError


def upsert_wishlist_entry(
    db: Session,
    user_id: int,
    slot_name: GearSlot,
    item_name: str,
    item_priority: int = 1,
) -> WishlistEntry:
    """Setzt das Item für Slot und Priorität; ein bestehender Eintrag wird ersetzt.

    Ein einziges ``INSERT ... ON CONFLICT DO UPDATE``, damit zwei gleichzeitige
    Anfragen nicht am Unique-Constraint scheitern.
    """
    item_name = (item_name or "").strip()
    if not item_name:
        raise ValidationError("Item-Name darf nicht leer sein")

    now = datetime.now(timezone.utc)
    insert = dialect_insert(db)
    stmt = insert(WishlistEntry).values(
        user_id=user_id,
        slot_name=slot_name,
        item_name=item_name,
        item_priority=item_priority,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id", "slot_name", "item_priority"],
        set_={"item_name": stmt.excluded.item_name, "updated_at": stmt.excluded.updated_at},
    )
    db.execute(stmt)
    db.commit()

    return db.query(WishlistEntry).filter(
        WishlistEntry.user_id == user_id,
        WishlistEntry.slot_name == slot_name,
        WishlistEntry.item_priority == item_priority,
    ).populate_existing().one()
