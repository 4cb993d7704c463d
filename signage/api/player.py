from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session
from signage.db import get_db
from signage.errors import Forbidden
from signage.models.display import Display
from signage.schemas.player import ActivePlaylistItemOut, CheckInOut, LinkIn, LinkOut
from signage.services.auth import get_current_display
from signage.services.displays import update_last_check_in
from signage.services.pairing import link_display
from signage.services.playlists import get_active_playlist

router = APIRouter(prefix="/api/player", tags=["player"])


@router.post("/link", response_model=LinkOut)
def link(payload: LinkIn | None = Body(None), db: Session = Depends(get_db)):
    display = link_display(db, payload.invite_code if payload is not None else None)
    return LinkOut(display_id=str(display.id), access_token=display.access_token)


@router.post("/checkin", response_model=CheckInOut)
def checkin(display: Display = Depends(get_current_display), db: Session = Depends(get_db)):
    update_last_check_in(db, display.id)
    return CheckInOut(success=True)


@router.get("/playlist/{display_id}", response_model=list[ActivePlaylistItemOut])
def player_playlist(
    display_id: str,
    display: Display = Depends(get_current_display),
    db: Session = Depends(get_db),
):
    if str(display.id) != display_id:
        raise Forbidden("Forbidden - token does not match display")
    return get_active_playlist(db, display_id)
