from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.models.wishlist import WishlistEntry
from app.schemas.wishlist import WishlistEntryUpsert, WishlistEntryResponse
from app.auth.jwt import get_current_user
from app.services.wishlist import upsert_wishlist_entry

router = APIRouter()


@router.get("/me", response_model=List[WishlistEntryResponse])
async def get_my_wishlist(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Gibt die eigene Wishlist zurück, sortiert nach Slot und Priorität."""
    return db.query(WishlistEntry).filter(
        WishlistEntry.user_id == current_user.id
    ).order_by(WishlistEntry.slot_name, WishlistEntry.item_priority).all()


@router.put("/me", response_model=WishlistEntryResponse)
async def put_wishlist_entry(
    entry_data: WishlistEntryUpsert,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Setzt das Item für Slot und Priorität (ersetzt einen bestehenden Eintrag)."""
    return upsert_wishlist_entry(
        db,
        current_user.id,
        entry_data.slot_name,
        entry_data.item_name,
        entry_data.item_priority,
    )


@router.delete("/me/{entry_id}")
async def delete_wishlist_entry(
    entry_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Entfernt einen Eintrag von der eigenen Wishlist."""
    entry = db.query(WishlistEntry).filter(
        WishlistEntry.id == entry_id,
        WishlistEntry.user_id == current_user.id
    ).first()
    if not entry:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Wishlist-Eintrag nicht gefunden"
        )

    db.delete(entry)
    db.commit()
    return {"message": "Wishlist-Eintrag entfernt"}
