from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session
from signage.db import get_db
from signage.errors import Forbidden
from signage.models.display import Display
from signage.models.schedule import Schedule
from signage.models.user import User
from signage.schemas.display import DisplayCreateIn, DisplayOut
from signage.services.auth import get_current_user
from signage.services.displays import create_display, derive_display_status, find_display, utcnow
from signage.services.realtime import ConnectionRegistry, get_registry

router = APIRouter(prefix="/api/displays", tags=["displays"])


def _display_out(display: Display, now) -> DisplayOut:
    out = DisplayOut.model_validate(display)
    out.status = derive_display_status(display.last_check_in, now)
    return out


def _owned_display(db: Session, display_id: str, user: User) -> Display:
    display = find_display(db, display_id)
    if not display:
        raise HTTPException(status_code=404, detail="Display not found")
    if display.client_id != user.id:
        raise Forbidden("Forbidden")
    return display


@router.post("", response_model=DisplayOut)
def add_display(payload: DisplayCreateIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Display name cannot be empty")
    display = create_display(db, user.id, name, payload.resolution)
    return _display_out(display, utcnow())


@router.get("", response_model=list[DisplayOut])
def list_displays(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    displays = (
        db.query(Display)
        .filter(Display.client_id == user.id)
        .order_by(Display.created_at.desc())
        .all()
    )
    # One clock reading for the whole listing.
    now = utcnow()
    return [_display_out(d, now) for d in displays]


@router.get("/{display_id}", response_model=DisplayOut)
def get_display(display_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _display_out(_owned_display(db, display_id, user), utcnow())


def _delete_display(db: Session, display_id: str, user: User) -> None:
    display = _owned_display(db, display_id, user)
    db.query(Schedule).filter(Schedule.display_id == display.id).delete(synchronize_session=False)
    db.delete(display)
    db.commit()


@router.delete("/{display_id}")
async def delete_display(
    display_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    registry: ConnectionRegistry = Depends(get_registry),
):
    await run_in_threadpool(_delete_display, db, display_id, user)

    # The token is gone with the row; drop any live channel as well.
    channel = await registry.lookup(display_id)
    if channel is not None:
        await registry.unregister(display_id, channel)
        await channel.close()
    return {"success": True}
