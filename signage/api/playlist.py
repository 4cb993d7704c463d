from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from signage.db import get_db
from signage.errors import Forbidden
from signage.models.media import Media
from signage.models.playlist import Playlist, PlaylistItem
from signage.models.user import User
from signage.schemas.playlist import PlaylistCreateIn, PlaylistItemCreateIn, PlaylistItemOut, PlaylistOut
from signage.services.auth import get_current_user

router = APIRouter(prefix="/api", tags=["playlists"])


def _owned_playlist(db: Session, playlist_id: str, user: User) -> Playlist:
    playlist = db.get(Playlist, playlist_id)
    if not playlist or playlist.client_id != user.id:
        raise Forbidden("Forbidden")
    return playlist


@router.post("/playlists", response_model=PlaylistOut)
def create_playlist(payload: PlaylistCreateIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    cleaned = payload.name.strip()
    if not cleaned:
        raise HTTPException(status_code=400, detail="Playlist name cannot be empty")
    playlist = Playlist(name=cleaned, client_id=user.id)
    db.add(playlist)
    db.commit()
    db.refresh(playlist)
    return playlist


@router.get("/playlists", response_model=list[PlaylistOut])
def list_playlists(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return (
        db.query(Playlist)
        .filter(Playlist.client_id == user.id)
        .order_by(Playlist.created_at.desc())
        .all()
    )


@router.get("/playlists/{playlist_id}", response_model=PlaylistOut)
def get_playlist(playlist_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    playlist = db.get(Playlist, playlist_id)
    if not playlist:
        raise HTTPException(status_code=404, detail="Playlist not found")
    if playlist.client_id != user.id:
        raise Forbidden("Forbidden")
    return playlist


@router.post("/playlist-items", response_model=PlaylistItemOut)
def add_item(payload: PlaylistItemCreateIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    _owned_playlist(db, payload.playlist_id, user)
    media = db.get(Media, payload.media_id)
    if not media or media.client_id != user.id:
        raise Forbidden("Forbidden - media not found or access denied")
    item = PlaylistItem(
        playlist_id=payload.playlist_id,
        media_id=payload.media_id,
        order=payload.order,
        duration=payload.duration,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


@router.get("/playlist-items/{playlist_id}", response_model=list[PlaylistItemOut])
def list_items(playlist_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    _owned_playlist(db, playlist_id, user)
    return (
        db.query(PlaylistItem)
        .filter(PlaylistItem.playlist_id == playlist_id)
        .order_by(PlaylistItem.order.asc(), PlaylistItem.created_at.asc())
        .all()
    )


@router.delete("/playlist-items/{item_id}")
def delete_item(item_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    item = db.get(PlaylistItem, item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Playlist item not found")
    _owned_playlist(db, item.playlist_id, user)
    db.delete(item)
    db.commit()
    return {"success": True}
