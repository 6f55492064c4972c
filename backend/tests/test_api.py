import pytest

from app.models import LootHistory, Notification, User, UserRole

ITEM = "Tevent's Despair Blade"


@pytest.fixture
def open_item(client, officer, auth_headers):
    def _open(item_name=ITEM, **extra):
        response = client.post(
            "/api/loot/sessions",
            json={"item_name": item_name, "activate": True, **extra},
            headers=auth_headers(officer),
        )
        assert response.status_code == 201, response.text
        return response.json()
    return _open


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_requires_login(client):
    assert client.get("/api/loot/sessions").status_code == 401
    assert client.get("/api/loot/sessions", headers={"Authorization": "Bearer kaputt"}).status_code == 401


def test_member_cannot_open_session(client, make_member, auth_headers):
    response = client.post("/api/loot/sessions", json={"item_name": ITEM}, headers=auth_headers(make_member("aria")))
    assert response.status_code == 403


def test_duplicate_active_session_conflicts(client, officer, auth_headers, open_item):
    open_item()
    response = client.post(
        "/api/loot/sessions", json={"item_name": ITEM, "activate": True}, headers=auth_headers(officer),
    )
    assert response.status_code == 409


def test_claim_flow_and_award(client, db, officer, make_member, add_wish, auth_headers, open_item):
    session = open_item()
    aria = make_member("aria", loot_count=1)
    bren = make_member("bren", loot_count=0)
    add_wish(aria, ITEM)
    add_wish(bren, ITEM)

    for member in (aria, bren):
        response = client.post(
            f"/api/loot/sessions/{session['id']}/claims", json={}, headers=auth_headers(member),
        )
        assert response.status_code == 200, response.text
        assert response.json()["kind"] == "request"

    listed = client.get("/api/loot/sessions", headers=auth_headers(aria)).json()
    assert [(s["id"], s["claim_count"]) for s in listed] == [(session["id"], 2)]

    candidates = client.get(f"/api/loot/sessions/{session['id']}/candidates", headers=auth_headers(officer)).json()
    assert candidates["recommended_user_id"] == bren.id
    assert [c["user_id"] for c in candidates["candidates"]] == [bren.id, aria.id]
    assert candidates["candidates"][0]["rank"] == 1

    response = client.post(
        f"/api/loot/sessions/{session['id']}/award", json={"winner_id": bren.id}, headers=auth_headers(officer),
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["winner_id"] == bren.id
    assert body["method"] == "council"
    assert body["loot_received_count"] == 1

    again = client.post(
        f"/api/loot/sessions/{session['id']}/award", json={"winner_id": aria.id}, headers=auth_headers(officer),
    )
    assert again.status_code == 409
    assert "bereits verteilt" in again.json()["detail"]

    history = client.get("/api/loot/history", headers=auth_headers(aria)).json()
    assert [(h["item_name"], h["user"]["id"]) for h in history] == [(ITEM, bren.id)]


def test_ineligible_claim_names_reason(client, make_member, add_wish, auth_headers, open_item):
    session = open_item()
    bren = make_member("bren")
    add_wish(bren, ITEM, priority=2)

    response = client.post(f"/api/loot/sessions/{session['id']}/claims", json={}, headers=auth_headers(bren))

    assert response.status_code == 403
    assert response.json()["detail"]["reason"] == "not_on_wishlist"


def test_brocante_claim_open_to_everyone(client, make_member, auth_headers, open_item):
    session = open_item("Alter Helm", category="brocante")
    response = client.post(
        f"/api/loot/sessions/{session['id']}/claims", json={"roll_value": 50}, headers=auth_headers(make_member("cato", points=0)),
    )
    assert response.status_code == 200
    assert response.json()["roll_value"] is None


def test_roll_out_of_range_is_rejected(client, make_member, add_wish, auth_headers, open_item):
    session = open_item()
    aria = make_member("aria")
    add_wish(aria, ITEM)
    response = client.post(
        f"/api/loot/sessions/{session['id']}/claims", json={"roll_value": 100}, headers=auth_headers(aria),
    )
    assert response.status_code == 422


def test_spin_only_among_checked(client, officer, make_member, add_wish, auth_headers, open_item):
    session = open_item()
    aria, bren = make_member("aria"), make_member("bren")
    for member in (aria, bren):
        add_wish(member, ITEM)
        client.post(f"/api/loot/sessions/{session['id']}/claims", json={}, headers=auth_headers(member))

    url = f"/api/loot/sessions/{session['id']}/spin"
    empty = client.post(url, json={"candidate_ids": []}, headers=auth_headers(officer))
    assert empty.status_code == 400

    for _ in range(5):
        response = client.post(url, json={"candidate_ids": [bren.id]}, headers=auth_headers(officer))
        assert response.json() == {"winner_user_id": bren.id, "winner_name": "bren", "pool_size": 1}


def test_refuse_claim(client, db, officer, make_member, add_wish, auth_headers, open_item):
    session = open_item()
    aria = make_member("aria")
    add_wish(aria, ITEM)
    client.post(f"/api/loot/sessions/{session['id']}/claims", json={}, headers=auth_headers(aria))

    response = client.delete(
        f"/api/loot/sessions/{session['id']}/claims/{aria.id}",
        params={"reason": "Nicht anwesend"},
        headers=auth_headers(officer),
    )
    assert response.status_code == 200
    claims = client.get(f"/api/loot/sessions/{session['id']}/claims", headers=auth_headers(aria)).json()
    assert claims == []

    notifications = client.get("/api/notifications", headers=auth_headers(aria)).json()
    assert notifications[0]["type"] == "loot_refused"
    assert "Nicht anwesend" in notifications[0]["message"]


def test_cancel_and_queue(client, officer, auth_headers):
    created = client.post("/api/loot/sessions", json={"item_name": ITEM}, headers=auth_headers(officer)).json()
    assert created["is_active"] is False

    opened = client.post(f"/api/loot/sessions/{created['id']}/open", headers=auth_headers(officer)).json()
    assert opened["is_active"] is True

    traits = client.post(
        f"/api/loot/sessions/{created['id']}/traits", json={"trait": "Glück"}, headers=auth_headers(officer),
    ).json()
    assert traits["custom_traits"] == ["Glück"]

    assert client.delete(f"/api/loot/sessions/{created['id']}", headers=auth_headers(officer)).status_code == 200
    assert client.get(f"/api/loot/sessions/{created['id']}", headers=auth_headers(officer)).status_code == 404


def test_award_announces_on_discord(client, db, guild, officer, make_member, auth_headers, open_item, monkeypatch):
    sent = []

    async def fake_send(url, message):
        sent.append((url, message))
        return True

    monkeypatch.setattr("app.routers.loot.send_webhook_message", fake_send)
    guild.discord_webhook_url = "https://discord.example/api/webhooks/1/abc"
    db.commit()

    session = open_item()
    aria = make_member("aria")
    response = client.post(
        f"/api/loot/sessions/{session['id']}/award", json={"winner_id": aria.id}, headers=auth_headers(officer),
    )

    assert response.status_code == 200
    assert len(sent) == 1
    url, message = sent[0]
    assert url == guild.discord_webhook_url
    assert ITEM in message.embeds[0]["title"]


def test_roulette_endpoints(client, db, officer, make_member, add_wish, auth_headers):
    item = "Deluzhnoa's Ice Wand"
    aria, bren = make_member("aria"), make_member("bren")
    add_wish(aria, item, priority=2)

    pool = client.post(
        "/api/loot/roulette/candidates",
        json={"item_name": item, "member_ids": [aria.id, bren.id]},
        headers=auth_headers(officer),
    ).json()
    assert [c["user_id"] for c in pool] == [aria.id]

    response = client.post(
        "/api/loot/roulette/award", json={"item_name": item, "winner_id": aria.id}, headers=auth_headers(officer),
    )
    assert response.status_code == 200
    assert response.json()["method"] == "roulette"
    assert db.query(LootHistory).one().loot_method.value == "roulette"


def test_wishlist_endpoints(client, make_member, auth_headers):
    aria = make_member("aria")
    headers = auth_headers(aria)

    created = client.put(
        "/api/wishlist/me", json={"slot_name": "head", "item_name": "Grim Reaper's Hood", "item_priority": 1}, headers=headers,
    ).json()
    replaced = client.put(
        "/api/wishlist/me", json={"slot_name": "head", "item_name": "Helm der Wacht", "item_priority": 1}, headers=headers,
    ).json()
    assert replaced["id"] == created["id"]
    assert replaced["item_name"] == "Helm der Wacht"

    assert len(client.get("/api/wishlist/me", headers=headers).json()) == 1
    assert client.delete(f"/api/wishlist/me/{created['id']}", headers=headers).status_code == 200
    assert client.get("/api/wishlist/me", headers=headers).json() == []


def test_guild_settings_admin_only(client, officer, admin, auth_headers):
    assert client.get("/api/guild/settings", headers=auth_headers(officer)).json()["loot_system"] == "council"

    forbidden = client.patch("/api/guild/settings", json={"loot_system": "roll"}, headers=auth_headers(officer))
    assert forbidden.status_code == 403

    updated = client.patch(
        "/api/guild/settings", json={"loot_system": "roll", "participation_threshold": 0}, headers=auth_headers(admin),
    ).json()
    assert updated["loot_system"] == "roll"
    assert updated["participation_threshold"] == 0


def test_notifications_mark_read(client, db, make_member, auth_headers):
    aria = make_member("aria")
    db.add(Notification(user_id=aria.id, type="loot_assigned", message="Glückwunsch"))
    db.commit()

    listed = client.get("/api/notifications", headers=auth_headers(aria)).json()
    read = client.post(f"/api/notifications/{listed[0]['id']}/read", headers=auth_headers(aria)).json()
    assert read["is_read"] is True
    assert client.get("/api/notifications", params={"unread_only": True}, headers=auth_headers(aria)).json() == []


def test_points_adjustment(client, db, officer, make_member, auth_headers):
    aria = make_member("aria", points=2)

    response = client.patch(f"/api/users/{aria.id}/points", json={"delta": -5}, headers=auth_headers(officer))
    assert response.json()["participation_points"] == 0

    members = client.get("/api/users", headers=auth_headers(aria)).json()
    assert {m["username"] for m in members} == {"offizier", "aria"}
    assert client.patch(f"/api/users/{aria.id}/points", json={"delta": 1}, headers=auth_headers(aria)).status_code == 403


def test_list_limits_are_bounded(client, make_member, auth_headers):
    headers = auth_headers(make_member("aria"))

    assert client.get("/api/loot/history", params={"limit": 500}, headers=headers).status_code == 422
    assert client.get("/api/loot/history", params={"limit": 200}, headers=headers).status_code == 200
    assert client.get("/api/notifications", params={"limit": 0}, headers=headers).status_code == 422
    assert client.get("/api/notifications", params={"limit": 201}, headers=headers).status_code == 422
