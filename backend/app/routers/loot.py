from typing import List, Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User, UserRole
from app.models.loot import LootSession, LootHistory, LootCategory
from app.schemas.loot import (
    LootSessionCreate, LootSessionResponse, TraitAdd,
    ClaimCreate, ClaimResponse,
    CandidateResponse, CandidateListResponse, SpinRequest, SpinResponse,
    AwardRequest, AwardResponse, RoulettePoolRequest, RouletteAwardRequest, LootHistoryResponse,
)
from app.auth.jwt import get_current_user
from app.auth.dependencies import check_role, check_guild_member
from app.services import sessions as session_service
from app.services import claims as claim_service
from app.services.award import LootAwardService, AwardReceipt
from app.services.errors import NotFound
from app.services.discord import build_loot_announcement, send_webhook_message
from app.services.eligibility import compute_candidates
from app.services.ranking import rank, recommended
from app.services.roulette import spin_winner, select_checked, roulette_pool

router = APIRouter()


def _session_response(session: LootSession, claim_count: int = 0) -> LootSessionResponse:
    response = LootSessionResponse.model_validate(session)
    response.claim_count = claim_count
    return response


def _award_response(receipt: AwardReceipt) -> AwardResponse:
    return AwardResponse(
        session_id=receipt.session_id,
        item_name=receipt.item_name,
        winner_id=receipt.winner_id,
        winner_name=receipt.winner_name,
        method=receipt.method,
        loot_received_count=receipt.loot_received_count,
        history_recorded=receipt.history_recorded,
        notified=receipt.notified,
        message=f"{receipt.item_name} an {receipt.winner_name} vergeben",
    )


def _announce(db: Session, receipt: AwardReceipt, background_tasks: BackgroundTasks) -> None:
    """Plant die Discord-Ankündigung, falls die Gilde einen Webhook hat."""
    guild = session_service.get_guild(db, receipt.guild_id)
    if guild.discord_webhook_url:
        background_tasks.add_task(
            send_webhook_message,
            guild.discord_webhook_url,
            build_loot_announcement(receipt.item_name, receipt.winner_name, receipt.method.value),
        )


@router.get("/sessions", response_model=List[LootSessionResponse])
async def get_loot_sessions(
    category: Optional[LootCategory] = None,
    active: Optional[bool] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Gibt die Loot-Sessions der eigenen Gilde zurück (Warteschlange und geöffnete)."""
    guild_id = check_guild_member(current_user)
    guild = session_service.get_guild(db, guild_id)

    sessions = session_service.list_sessions(db, guild_id, category=category, active=active)
    counts = session_service.claim_counts(db, sessions, guild.loot_system)
    return [_session_response(s, counts.get(s.id, 0)) for s in sessions]


@router.get("/sessions/{session_id}", response_model=LootSessionResponse)
async def get_loot_session(
    session_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Gibt eine einzelne Loot-Session zurück."""
    guild_id = check_guild_member(current_user)
    session = session_service.get_session(db, session_id)
    if session.guild_id != guild_id:
        raise NotFound()

    guild = session_service.get_guild(db, guild_id)
    counts = session_service.claim_counts(db, [session], guild.loot_system)
    return _session_response(session, counts.get(session.id, 0))


@router.post("/sessions", response_model=LootSessionResponse, status_code=status.HTTP_201_CREATED)
async def create_loot_session(
    session_data: LootSessionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Legt eine Loot-Session an (Warteschlange oder direkt geöffnet). Nur Offiziere+."""
    check_role(current_user, UserRole.OFFICER)

    session = session_service.open_session(
        db,
        current_user,
        session_data.item_name,
        category=session_data.category,
        activate=session_data.activate,
        custom_name=session_data.custom_name,
        custom_traits=session_data.custom_traits,
        rarity=session_data.rarity,
        image_url=session_data.image_url,
    )
    return _session_response(session)


@router.post("/sessions/{session_id}/open", response_model=LootSessionResponse)
async def open_loot_session(
    session_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Öffnet eine Session aus der Warteschlange für Anfragen und Würfe. Nur Offiziere+."""
    check_role(current_user, UserRole.OFFICER)
    return _session_response(session_service.activate_session(db, current_user, session_id))


@router.delete("/sessions/{session_id}")
async def cancel_loot_session(
    session_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Bricht eine Session ab, ohne sie zu vergeben. Nur Offiziere+."""
    check_role(current_user, UserRole.OFFICER)
    session_service.cancel_session(db, current_user, session_id)
    return {"message": "Loot-Session abgebrochen"}


@router.post("/sessions/{session_id}/traits", response_model=LootSessionResponse)
async def add_loot_trait(
    session_id: int,
    trait_data: TraitAdd,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Fügt der Anzeige einen Trait hinzu. Nur Offiziere+."""
    check_role(current_user, UserRole.OFFICER)
    return _session_response(session_service.add_trait(db, current_user, session_id, trait_data.trait))


@router.post("/sessions/{session_id}/claims", response_model=ClaimResponse)
async def submit_claim(
    session_id: int,
    claim_data: ClaimCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Anfrage oder Wurf auf eine geöffnete Session abgeben."""
    check_guild_member(current_user)
    return claim_service.submit_claim(
        db,
        session_id,
        current_user,
        roll_value=claim_data.roll_value,
        kind=claim_data.kind,
    )


@router.get("/sessions/{session_id}/claims", response_model=List[ClaimResponse])
async def get_claims(
    session_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Alle Anfragen und Würfe einer Session."""
    check_guild_member(current_user)
    return claim_service.list_claims(db, session_id, current_user)


@router.delete("/sessions/{session_id}/claims/{user_id}")
async def refuse_claim(
    session_id: int,
    user_id: int,
    reason: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Lehnt die Anfrage eines Mitglieds ab. Nur Offiziere+."""
    check_role(current_user, UserRole.OFFICER)
    claim_service.refuse_claim(db, current_user, session_id, user_id, reason=reason)
    return {"message": "Anfrage abgelehnt"}


@router.get("/sessions/{session_id}/candidates", response_model=CandidateListResponse)
async def get_candidates(
    session_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Sortierte Kandidatenliste mit Empfehlung. Nur Offiziere+."""
    check_role(current_user, UserRole.OFFICER)
    session = session_service.get_active_session(db, session_id)
    session_service.ensure_officer(current_user, session.guild_id)
    guild = session_service.get_guild(db, session.guild_id)

    ranked = rank(compute_candidates(db, session_id, guild.loot_system), guild.loot_system, session.is_brocante)
    top = recommended(ranked)
    return CandidateListResponse(
        session_id=session.id,
        item_name=session.item_name,
        loot_system=guild.loot_system,
        is_brocante=session.is_brocante,
        recommended_user_id=top.user_id if top else None,
        candidates=[
            CandidateResponse(rank=position, **vars(candidate))
            for position, candidate in enumerate(ranked, start=1)
        ],
    )


@router.post("/sessions/{session_id}/spin", response_model=SpinResponse)
async def spin_session(
    session_id: int,
    spin: SpinRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Dreht das Glücksrad unter den angehakten Kandidaten. Speichert nichts. Nur Offiziere+."""
    check_role(current_user, UserRole.OFFICER)
    session = session_service.get_active_session(db, session_id)
    session_service.ensure_officer(current_user, session.guild_id)

    checked = select_checked(compute_candidates(db, session_id), spin.candidate_ids)
    winner = spin_winner(checked)
    return SpinResponse(winner_user_id=winner.user_id, winner_name=winner.name, pool_size=len(checked))


@router.post("/sessions/{session_id}/award", response_model=AwardResponse)
async def award_session(
    session_id: int,
    award: AwardRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Vergibt das Item an einen Gewinner und schließt die Session. Nur Offiziere+."""
    check_role(current_user, UserRole.OFFICER)
    receipt = LootAwardService(db).award(session_id, award.winner_id, current_user, method=award.method)
    _announce(db, receipt, background_tasks)
    return _award_response(receipt)


@router.get("/history", response_model=List[LootHistoryResponse])
async def get_loot_history(
    limit: int = Query(50, ge=1, le=200),
    user_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Gibt den Loot-Verlauf der eigenen Gilde zurück."""
    guild_id = check_guild_member(current_user)
    query = db.query(LootHistory).filter(LootHistory.guild_id == guild_id)
    if user_id is not None:
        query = query.filter(LootHistory.user_id == user_id)
    return query.order_by(LootHistory.created_at.desc(), LootHistory.id.desc()).limit(limit).all()


@router.post("/roulette/candidates", response_model=List[CandidateResponse])
async def get_roulette_candidates(
    pool_request: RoulettePoolRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Glücksrad-Kandidaten für ein Item aus den anwesenden Mitgliedern. Nur Offiziere+."""
    check_role(current_user, UserRole.OFFICER)
    guild_id = check_guild_member(current_user)
    pool = roulette_pool(db, guild_id, pool_request.item_name, pool_request.member_ids)
    return [CandidateResponse(rank=position, **vars(c)) for position, c in enumerate(pool, start=1)]


@router.post("/roulette/award", response_model=AwardResponse)
async def award_roulette(
    award: RouletteAwardRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Speichert den Gewinner eines Raid-Glücksrads. Nur Offiziere+."""
    check_role(current_user, UserRole.OFFICER)
    receipt = LootAwardService(db).award_roulette(award.item_name, award.winner_id, current_user)
    _announce(db, receipt, background_tasks)
    return _award_response(receipt)
