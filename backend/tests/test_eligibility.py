from datetime import datetime, timedelta, timezone

import pytest

from app.models import Guild, LootClaim, ClaimKind, LootCategory, LootSystem
from app.services.eligibility import check_claim_eligibility, compute_candidates, wishlist_priorities
from app.services.errors import NotEligible, NotFound
from app.services.sessions import open_session

ITEM = "Tevent's Despair Blade"


@pytest.fixture
def raid_session(db, officer):
    return open_session(db, officer, ITEM, activate=True)


@pytest.fixture
def brocante_session(db, officer):
    return open_session(db, officer, "Alter Helm", category=LootCategory.BROCANTE, activate=True)


def add_claim(db, session, user, kind=ClaimKind.REQUEST, roll_value=None, at=None):
    claim = LootClaim(
        session_id=session.id,
        user_id=user.id,
        guild_id=session.guild_id,
        item_name=session.item_name,
        kind=kind,
        roll_value=roll_value,
        created_at=at or datetime.now(timezone.utc),
    )
    db.add(claim)
    db.commit()
    return claim


def test_priority_one_with_enough_points_is_eligible(db, raid_session, make_member, add_wish):
    member = make_member("aria", points=3)
    add_wish(member, ITEM, priority=1)
    check_claim_eligibility(db, raid_session, member)


def test_priority_two_is_rejected_on_raid_loot(db, raid_session, make_member, add_wish):
    member = make_member("bren", points=10)
    add_wish(member, ITEM, priority=2)

    with pytest.raises(NotEligible) as exc_info:
        check_claim_eligibility(db, raid_session, member)
    assert exc_info.value.reason == NotEligible.NOT_ON_WISHLIST


def test_same_member_may_claim_brocante(db, brocante_session, make_member, add_wish):
    member = make_member("bren", points=0)
    add_wish(member, ITEM, priority=2)
    check_claim_eligibility(db, brocante_session, member)


def test_insufficient_points(db, raid_session, make_member, add_wish):
    member = make_member("cato", points=2)
    add_wish(member, ITEM, priority=1)

    with pytest.raises(NotEligible) as exc_info:
        check_claim_eligibility(db, raid_session, member)
    assert exc_info.value.reason == NotEligible.INSUFFICIENT_PARTICIPATION
    assert "3" in exc_info.value.detail


def test_wishlist_checked_before_points(db, raid_session, make_member):
    member = make_member("dora", points=0)
    with pytest.raises(NotEligible) as exc_info:
        check_claim_eligibility(db, raid_session, member)
    assert exc_info.value.reason == NotEligible.NOT_ON_WISHLIST


def test_wishlist_priorities_picks_best_entry(db, make_member, add_wish):
    from app.models import GearSlot

    member = make_member("aria")
    add_wish(member, ITEM, priority=3, slot=GearSlot.MAIN_HAND)
    add_wish(member, ITEM, priority=2, slot=GearSlot.OFF_HAND)

    assert wishlist_priorities(db, ITEM, [member.id]) == {member.id: (2, "off_hand")}
    assert wishlist_priorities(db, ITEM, []) == {}


def test_council_counts_only_requests(db, guild, raid_session, make_member, add_wish):
    requester = make_member("aria", loot_count=2)
    roller = make_member("bren")
    add_wish(requester, ITEM, priority=1)
    add_claim(db, raid_session, requester)
    add_claim(db, raid_session, roller, kind=ClaimKind.ROLL, roll_value=77)

    candidates = compute_candidates(db, raid_session.id)

    assert [c.user_id for c in candidates] == [requester.id]
    candidate = candidates[0]
    assert candidate.name == "aria"
    assert candidate.loot_received_count == 2
    assert candidate.participation_points == 5
    assert candidate.item_priority == 1
    assert candidate.slot_name == "main_hand"
    assert candidate.roll_value is None


def test_roll_policy_counts_only_rolls(db, guild, raid_session, make_member):
    requester = make_member("aria")
    roller = make_member("bren")
    add_claim(db, raid_session, requester)
    add_claim(db, raid_session, roller, kind=ClaimKind.ROLL, roll_value=77)

    candidates = compute_candidates(db, raid_session.id, LootSystem.ROLL)

    assert [(c.user_id, c.roll_value) for c in candidates] == [(roller.id, 77)]
    assert candidates[0].item_priority is None


def test_brocante_counts_every_claim(db, brocante_session, make_member):
    early = make_member("aria")
    late = make_member("bren")
    now = datetime.now(timezone.utc)
    add_claim(db, brocante_session, late, at=now + timedelta(seconds=2))
    add_claim(db, brocante_session, early, at=now)

    candidates = compute_candidates(db, brocante_session.id, LootSystem.ROLL)
    assert sorted(c.user_id for c in candidates) == sorted([early.id, late.id])


def test_members_of_other_guilds_are_ignored(db, raid_session, make_member):
    other = Guild(name="Andere Gilde")
    db.add(other)
    db.commit()
    stranger = make_member("fremd", guild_id=other.id)
    add_claim(db, raid_session, stranger)

    assert compute_candidates(db, raid_session.id) == []


def test_no_claims_is_empty_not_error(db, raid_session):
    assert compute_candidates(db, raid_session.id) == []


def test_inactive_session_is_not_found(db, officer):
    queued = open_session(db, officer, "Grim Reaper's Hood")
    with pytest.raises(NotFound):
        compute_candidates(db, queued.id)
    with pytest.raises(NotFound):
        compute_candidates(db, 9999)
