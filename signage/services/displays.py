import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from signage.errors import Internal
from signage.models.display import Display
from signage.models.media import Media
from signage.models.playlist import PlaylistItem
from signage.services.credentials import INVITE_CODE_MAX_ATTEMPTS, generate_unique_invite_code

logger = logging.getLogger(__name__)

# Fixed for every display; a check-in older than this reads as offline.
ONLINE_WINDOW = timedelta(minutes=10)


def utcnow() -> datetime:
    # Naive UTC wall clock, matching what the DateTime columns store.
    return datetime.now(timezone.utc).replace(tzinfo=None)


def derive_display_status(last_check_in: datetime | None, now_utc: datetime) -> str:
    if last_check_in is None:
        return "offline"
    return "online" if (now_utc - last_check_in) < ONLINE_WINDOW else "offline"


def is_display_online(display: Display, now_utc: datetime | None = None) -> bool:
    return derive_display_status(display.last_check_in, now_utc or utcnow()) == "online"


def _invite_code_taken(db: Session, code: str) -> bool:
    return db.query(Display.id).filter(Display.invite_code == code).first() is not None


def create_display(db: Session, client_id: str, name: str, resolution: str | None = None) -> Display:
    last_error: IntegrityError | None = None
    for _ in range(INVITE_CODE_MAX_ATTEMPTS):
        code = generate_unique_invite_code(lambda value: _invite_code_taken(db, value))
        display = Display(
            name=name,
            invite_code=code,
            client_id=client_id,
            is_linked=False,
            resolution=resolution or "1080p",
        )
        db.add(display)
        try:
            db.commit()
        except IntegrityError as exc:
            # Another request claimed the same code between check and insert.
            db.rollback()
            last_error = exc
            continue
        db.refresh(display)
        logger.info("Display %s created for client %s", display.id, client_id)
        return display
    logger.error("Invite code allocation for client %s kept colliding on insert", client_id)
    raise Internal("Could not allocate a unique invite code") from last_error


def find_display(db: Session, display_id: str) -> Display | None:
    return db.get(Display, display_id)


def find_display_by_invite_code(db: Session, code: str) -> Display | None:
    return db.query(Display).filter(Display.invite_code == code).first()


def find_display_by_access_token(db: Session, token: str) -> Display | None:
    if not token:
        return None
    return db.query(Display).filter(Display.access_token == token).first()


def set_display_linked(db: Session, display: Display, access_token: str, check_in_time: datetime) -> Display:
    display.access_token = access_token
    display.is_linked = True
    display.last_check_in = check_in_time
    db.commit()
    db.refresh(display)
    return display


def update_last_check_in(db: Session, display_id: str, when: datetime | None = None) -> None:
    db.query(Display).filter(Display.id == display_id).update(
        {"last_check_in": when or utcnow()},
        synchronize_session=False,
    )
    db.commit()


def update_display_playlist(db: Session, display_id: str, playlist_id: str | None) -> None:
    db.query(Display).filter(Display.id == display_id).update(
        {"assigned_playlist_id": playlist_id},
        synchronize_session=False,
    )
    db.commit()


def get_assigned_playlist_items(db: Session, display_id: str) -> list[tuple[PlaylistItem, Media]]:
    display = find_display(db, display_id)
    if display is None or not display.assigned_playlist_id:
        return []
    return (
        db.query(PlaylistItem, Media)
        .join(Media, PlaylistItem.media_id == Media.id)
        .filter(PlaylistItem.playlist_id == display.assigned_playlist_id)
        .order_by(PlaylistItem.order.asc(), PlaylistItem.created_at.asc(), PlaylistItem.id.asc())
        .all()
    )
