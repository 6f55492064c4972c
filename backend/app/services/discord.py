import logging
import httpx
from typing import Optional
from dataclasses import dataclass, field

from app.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

LOOT_EMBED_COLOR = 0xF59E0B  # Bernstein wie im Loot-Bereich der Web-App

METHOD_LABELS = {
    "roll": "Würfeln",
    "roulette": "Glücksrad",
    "council": "Loot-Rat",
    "fcfs": "Wer zuerst kommt",
    "brocante": "Brocante",
}


@dataclass
class WebhookMessage:
    """Nachricht für einen Discord-Webhook."""
    content: Optional[str] = None
    username: Optional[str] = None
    embeds: list[dict] = field(default_factory=list)

    def to_payload(self) -> dict:
        payload: dict = {"embeds": self.embeds}
        if self.content:
            payload["content"] = self.content
        if self.username:
            payload["username"] = self.username
        return payload


def build_loot_announcement(item_name: str, winner_name: str, method: str) -> WebhookMessage:
    """Baut die Gewinner-Ankündigung für den Raid-Kanal."""
    return WebhookMessage(
        username="Loot",
        embeds=[{
            "title": f"🎁 {item_name}",
            "description": f"**{winner_name}** erhält das Item.",
            "color": LOOT_EMBED_COLOR,
            "fields": [
                {"name": "Verteilung", "value": METHOD_LABELS.get(method, method), "inline": True},
            ],
        }],
    )


async def send_webhook_message(webhook_url: Optional[str], message: WebhookMessage) -> bool:
    """Schickt eine Nachricht an einen Discord-Webhook.

    Ohne URL wird nichts gesendet. Fehler werden geloggt, nicht geworfen -
    die Ankündigung ist optional.
    """
    if not webhook_url:
        return False

    try:
        async with httpx.AsyncClient(timeout=settings.discord_timeout_seconds) as client:
            response = await client.post(webhook_url, json=message.to_payload())
    except httpx.HTTPError as exc:
        logger.warning("Discord-Webhook nicht erreichbar: %s", exc)
        return False

    # Discord antwortet mit 204 ohne ?wait=true
    if response.status_code not in (200, 204):
        logger.warning("Discord-Webhook antwortet mit %s: %s", response.status_code, response.text[:200])
        return False
    return True
