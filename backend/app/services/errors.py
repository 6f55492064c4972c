"""
Fehler der Loot-Verteilung.

Die Services werfen diese Exceptions, der Handler in ``app.main`` übersetzt
sie mit ``to_http_exception`` in HTTP-Antworten.
"""

from typing import Optional

from fastapi import HTTPException, status


class LootError(Exception):
    """Basisklasse aller fachlichen Loot-Fehler."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Loot-Aktion fehlgeschlagen"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(LootError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Ungültige Eingabe"


class PermissionDenied(LootError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Diese Aktion erfordert mindestens die Rolle: officer"


class NotFound(LootError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Loot-Session nicht gefunden"


class AlreadyAwarded(LootError):
    """Ein anderer Offizier hat die Session bereits vergeben."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Dieses Item wurde bereits verteilt"


class DuplicateActiveSession(LootError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Für dieses Item ist bereits eine Loot-Session geöffnet"


class NotEligible(LootError):
    """Mitglied darf keinen Claim abgeben. ``reason`` nennt das verletzte Kriterium."""
    status_code = status.HTTP_403_FORBIDDEN

    NOT_ON_WISHLIST = "not_on_wishlist"
    INSUFFICIENT_PARTICIPATION = "insufficient_participation"

    _details = {
        NOT_ON_WISHLIST: "Nicht berechtigt: Das Item steht nicht auf deiner Wishlist (Priorität 1)",
        INSUFFICIENT_PARTICIPATION: "Nicht berechtigt: Zu wenig Teilnahmepunkte",
    }

    def __init__(self, reason: str, detail: Optional[str] = None):
        self.reason = reason
        super().__init__(detail or self._details.get(reason))


class EmptySelection(LootError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Kein Spieler für das Glücksrad ausgewählt"


class DependencyFailure(LootError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Datenbank nicht erreichbar, bitte erneut versuchen"


def to_http_exception(error: LootError) -> HTTPException:
    """Übersetzt einen Loot-Fehler in eine HTTPException."""
    if isinstance(error, NotEligible):
        return HTTPException(
            status_code=error.status_code,
            detail={"reason": error.reason, "message": error.detail},
        )
    return HTTPException(status_code=error.status_code, detail=error.detail)
