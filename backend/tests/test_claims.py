import random

import pytest

from app.models import Guild, LootClaim, ClaimKind, LootCategory, LootSystem
from app.services.claims import resolve_claim_kind, submit_claim, list_claims, refuse_claim
from app.services.errors import ValidationError, PermissionDenied, NotFound, NotEligible
from app.services.sessions import open_session
from app.models.notification import Notification

ITEM = "Queen Bellandir's Hive Mind Staff"


@pytest.fixture
def session(db, officer):
    return open_session(db, officer, ITEM, activate=True)


@pytest.fixture
def eligible(make_member, add_wish):
    def _make(username, **kwargs):
        member = make_member(username, **kwargs)
        add_wish(member, ITEM, priority=1)
        return member
    return _make


def test_request_is_stored(db, session, eligible):
    member = eligible("aria")
    claim = submit_claim(db, session.id, member)

    assert claim.kind == ClaimKind.REQUEST
    assert claim.roll_value is None
    assert claim.item_name == ITEM
    assert claim.created_at is not None


def test_second_claim_keeps_first(db, session, eligible):
    member = eligible("aria")
    first = submit_claim(db, session.id, member, roll_value=42)
    second = submit_claim(db, session.id, member, roll_value=99)

    assert second.id == first.id
    assert second.roll_value == 42
    assert db.query(LootClaim).filter(LootClaim.session_id == session.id).count() == 1


def test_legacy_zero_roll_is_request(db, session, eligible):
    claim = submit_claim(db, session.id, eligible("aria"), roll_value=0)
    assert claim.kind == ClaimKind.REQUEST
    assert claim.roll_value is None


def test_server_rolls_in_roll_mode(db, guild, session, eligible):
    guild.loot_system = LootSystem.ROLL
    db.commit()

    claim = submit_claim(db, session.id, eligible("aria"), rng=random.Random(7))
    assert claim.kind == ClaimKind.ROLL
    assert 1 <= claim.roll_value <= 99


def test_resolve_claim_kind():
    assert resolve_claim_kind(None, None, False, LootSystem.COUNCIL) == (ClaimKind.REQUEST, None)
    assert resolve_claim_kind(None, 17, False, LootSystem.COUNCIL) == (ClaimKind.ROLL, 17)
    assert resolve_claim_kind(ClaimKind.ROLL, 99, True, LootSystem.ROLL) == (ClaimKind.REQUEST, None)
    kind, value = resolve_claim_kind(ClaimKind.ROLL, None, False, LootSystem.COUNCIL, random.Random(1))
    assert kind == ClaimKind.ROLL and 1 <= value <= 99


@pytest.mark.parametrize("kind, roll_value", [
    (ClaimKind.ROLL, 100),
    (ClaimKind.ROLL, 0),
    (ClaimKind.ROLL, -3),
    (ClaimKind.REQUEST, 12),
])
def test_invalid_rolls_are_rejected(kind, roll_value):
    with pytest.raises(ValidationError):
        resolve_claim_kind(kind, roll_value, False, LootSystem.ROLL)


def test_ineligible_member_cannot_claim(db, session, make_member):
    member = make_member("bren")
    with pytest.raises(NotEligible):
        submit_claim(db, session.id, member)
    assert db.query(LootClaim).count() == 0


def test_member_of_other_guild_cannot_claim(db, session, make_member):
    other = Guild(name="Andere Gilde")
    db.add(other)
    db.commit()
    with pytest.raises(PermissionDenied):
        submit_claim(db, session.id, make_member("fremd", guild_id=other.id))


def test_claim_on_queued_session_is_not_found(db, officer, eligible):
    queued = open_session(db, officer, "Grim Reaper's Robe")
    with pytest.raises(NotFound):
        submit_claim(db, queued.id, eligible("aria"))


def test_brocante_claim_is_always_request(db, officer, make_member):
    brocante = open_session(db, officer, "Alter Helm", category=LootCategory.BROCANTE, activate=True)
    claim = submit_claim(db, brocante.id, make_member("cato", points=0), kind=ClaimKind.ROLL, roll_value=80)
    assert claim.kind == ClaimKind.REQUEST
    assert claim.roll_value is None


def test_list_claims_highest_roll_first(db, session, eligible, officer):
    low = submit_claim(db, session.id, eligible("aria"), roll_value=10)
    high = submit_claim(db, session.id, eligible("bren"), roll_value=90)
    request = submit_claim(db, session.id, eligible("cato"))

    assert [c.id for c in list_claims(db, session.id, officer)] == [high.id, low.id, request.id]


def test_refuse_claim_deletes_and_notifies(db, session, eligible, officer):
    member = eligible("aria")
    submit_claim(db, session.id, member)

    refuse_claim(db, officer, session.id, member.id, reason="Schon ausgerüstet")

    assert db.query(LootClaim).count() == 0
    notification = db.query(Notification).filter(Notification.user_id == member.id).one()
    assert notification.type == "loot_refused"
    assert "Schon ausgerüstet" in notification.message

    with pytest.raises(NotFound):
        refuse_claim(db, officer, session.id, member.id)


def test_member_cannot_refuse(db, session, eligible):
    member = eligible("aria")
    submit_claim(db, session.id, member)
    with pytest.raises(PermissionDenied):
        refuse_claim(db, member, session.id, member.id)
