import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session
from signage.db import get_db
from signage.errors import Forbidden
from signage.models.display import Display
from signage.models.playlist import Playlist
from signage.models.schedule import Schedule
from signage.models.user import User
from signage.schemas.schedule import ScheduleCreateIn, ScheduleOut
from signage.services.auth import get_current_user
from signage.services.displays import find_display, update_display_playlist
from signage.services.realtime import NotificationDispatcher, get_dispatcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/schedules", tags=["schedules"])


def _create_schedule(db: Session, payload: ScheduleCreateIn, user: User) -> Schedule:
    display = find_display(db, payload.display_id)
    if not display or display.client_id != user.id:
        raise Forbidden("Forbidden")
    playlist = db.get(Playlist, payload.playlist_id)
    if not playlist or playlist.client_id != user.id:
        raise Forbidden("Forbidden - playlist not found or access denied")

    schedule = Schedule(
        display_id=payload.display_id,
        playlist_id=payload.playlist_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        always_on=payload.always_on,
        priority=payload.priority,
    )
    db.add(schedule)
    db.commit()
    db.refresh(schedule)

    # Latest schedule wins the display; no conflict check against older ones.
    update_display_playlist(db, payload.display_id, payload.playlist_id)
    db.refresh(schedule)
    return schedule


@router.post("", response_model=ScheduleOut)
async def create_schedule(
    payload: ScheduleCreateIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    schedule = await run_in_threadpool(_create_schedule, db, payload, user)
    delivered = await dispatcher.notify_refresh(payload.display_id)
    logger.info(
        "Schedule %s assigned playlist %s to display %s (live refresh: %s)",
        schedule.id,
        payload.playlist_id,
        payload.display_id,
        delivered,
    )
    return schedule


@router.get("", response_model=list[ScheduleOut])
def list_schedules(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return (
        db.query(Schedule)
        .join(Display, Schedule.display_id == Display.id)
        .filter(Display.client_id == user.id)
        .order_by(Schedule.created_at.desc())
        .all()
    )


@router.delete("/{schedule_id}")
def delete_schedule(schedule_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    schedule = db.get(Schedule, schedule_id)
    if not schedule:
        raise HTTPException(status_code=404, detail="Schedule not found")
    display = find_display(db, schedule.display_id)
    if not display or display.client_id != user.id:
        raise Forbidden("Forbidden")
    db.delete(schedule)
    db.commit()
    return {"success": True}
