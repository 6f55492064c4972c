from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User, UserRole
from app.schemas.user import UserResponse, ParticipationPointsUpdate
from app.auth.jwt import get_current_user
from app.auth.dependencies import check_role, check_guild_member

router = APIRouter()


@router.get("", response_model=List[UserResponse])
async def get_guild_members(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Gibt alle Mitglieder der eigenen Gilde zurück."""
    guild_id = check_guild_member(current_user)
    return db.query(User).filter(User.guild_id == guild_id).order_by(User.username).all()


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Gibt den aktuell eingeloggten Benutzer zurück."""
    return current_user


@router.patch("/{user_id}/points", response_model=UserResponse)
async def adjust_participation_points(
    user_id: int,
    points_update: ParticipationPointsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Ändert die Teilnahmepunkte eines Mitglieds. Nur Offiziere+."""
    check_role(current_user, UserRole.OFFICER)
    guild_id = check_guild_member(current_user)

    member = db.query(User).filter(User.id == user_id, User.guild_id == guild_id).first()
    if not member:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Mitglied nicht gefunden"
        )

    # Punkte werden nie negativ
    member.participation_points = max(0, (member.participation_points or 0) + points_update.delta)
    db.commit()
    db.refresh(member)
    return member
