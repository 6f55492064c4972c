"""
Sortierung der Loot-Kandidaten.

Reine Funktionen ohne Datenbankzugriff. Jede Sortierung endet mit der
Mitglieds-ID, damit die Reihenfolge bei gleichen Werten stabil bleibt.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Union

from app.models.guild import LootSystem

NO_PRIORITY = 99  # Ohne Wishlist-Eintrag ganz hinten


@dataclass
class Candidate:
    """Ein Mitglied, das für eine Loot-Session in Frage kommt."""
    user_id: int
    name: str
    loot_received_count: int = 0
    participation_points: int = 0
    item_priority: Optional[int] = None
    slot_name: Optional[str] = None
    roll_value: Optional[int] = None
    claimed_at: Optional[Union[datetime, str]] = None


def _timestamp_key(value: Optional[Union[datetime, str]]) -> float:
    """Zeitstempel als Sekunden; fehlend oder unlesbar = unendlich spät."""
    if value is None:
        return float("inf")
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return float("inf")
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def _roll_key(candidate: Candidate):
    return (
        -(candidate.roll_value or 0),
        candidate.loot_received_count,
        -candidate.participation_points,
        candidate.user_id,
    )


def _council_key(candidate: Candidate):
    priority = candidate.item_priority if candidate.item_priority is not None else NO_PRIORITY
    return (
        priority,
        candidate.loot_received_count,
        -candidate.participation_points,
        candidate.user_id,
    )


def _brocante_key(candidate: Candidate):
    return (_timestamp_key(candidate.claimed_at), candidate.user_id)


def rank(candidates: List[Candidate], policy: LootSystem, is_brocante: bool) -> List[Candidate]:
    """Sortiert Kandidaten nach dem Verteilungs-Modus.

    - Brocante: frühester Claim zuerst
    - Roll: höchster Wurf, dann weniger erhaltene Loots, dann mehr Punkte
    - Loot-Rat / FCFS: beste Wishlist-Priorität, dann weniger erhaltene
      Loots, dann mehr Punkte
    """
    if is_brocante:
        key = _brocante_key
    elif policy == LootSystem.ROLL:
        key = _roll_key
    else:
        key = _council_key
    return sorted(candidates, key=key)


def recommended(ranked: List[Candidate]) -> Optional[Candidate]:
    """Empfohlener Gewinner - nur ein Vorschlag für den Offizier."""
    return ranked[0] if ranked else None
