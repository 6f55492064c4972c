"""
Glücksrad: zufällige Auswahl unter den vom Offizier angehakten Kandidaten.

Die Auswahl wird nicht gespeichert - jeder Dreh ist unabhängig. Erst
``award`` mit Methode ``roulette`` schreibt den Gewinner fest.
"""

import random
from collections import Counter
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from app.models.loot import LootHistory
from app.models.user import User
from app.services.eligibility import wishlist_priorities
from app.services.errors import EmptySelection
from app.services.ranking import Candidate


def spin_winner(checked: List[Candidate], rng: Optional[random.Random] = None) -> Candidate:
    """Wählt gleichverteilt einen Gewinner aus den angehakten Kandidaten."""
    if not checked:
        raise EmptySelection()
    return (rng or random).choice(checked)


def select_checked(candidates: Iterable[Candidate], checked_ids: Iterable[int]) -> List[Candidate]:
    """Filtert die Kandidaten auf die angehakten IDs; unbekannte IDs zählen nicht."""
    wanted = set(checked_ids)
    return [c for c in candidates if c.user_id in wanted]


def roulette_pool(db: Session, guild_id: int, item_name: str, member_ids: Iterable[int]) -> List[Candidate]:
    """Kandidaten für das Raid-Glücksrad ohne Session.

    Alle angegebenen Gildenmitglieder mit dem Item auf der Wishlist (egal
    welche Priorität). Der Punktestand ist die Zahl früherer Loots in dieser
    Gilde - wenig erhaltene Loots zuerst.
    """
    member_ids = list(member_ids)
    if not member_ids:
        return []

    members = db.query(User).filter(
        User.id.in_(member_ids),
        User.guild_id == guild_id,
    ).all()
    if not members:
        return []

    best_priority = wishlist_priorities(db, item_name, [m.id for m in members])
    if not best_priority:
        return []

    history_rows = db.query(LootHistory.user_id).filter(
        LootHistory.guild_id == guild_id,
        LootHistory.user_id.in_(list(best_priority)),
    ).all()
    score = Counter(row.user_id for row in history_rows)

    pool = [
        Candidate(
            user_id=m.id,
            name=m.name,
            loot_received_count=score.get(m.id, 0),
            participation_points=m.participation_points or 0,
            item_priority=best_priority[m.id][0],
            slot_name=best_priority[m.id][1],
        )
        for m in members
        if m.id in best_priority
    ]
    return sorted(pool, key=lambda c: (c.loot_received_count, c.user_id))
