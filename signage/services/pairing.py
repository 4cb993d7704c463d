import logging

from sqlalchemy.orm import Session

from signage.errors import NotFound, ValidationError
from signage.models.display import Display
from signage.services.credentials import mint_access_token
from signage.services.displays import find_display_by_invite_code, set_display_linked, utcnow

logger = logging.getLogger(__name__)


def normalize_invite_code(code: str | None) -> str:
    normalized = (code or "").strip().upper()
    if not normalized:
        raise ValidationError("Invite code is required")
    return normalized


def link_display(db: Session, code: str | None) -> Display:
    """Pair a device with the display that owns ``code``.

    Always mints a fresh access token. Linking an already-linked display
    therefore revokes whatever token the previous device held.
    """
    invite_code = normalize_invite_code(code)
    display = find_display_by_invite_code(db, invite_code)
    if display is None:
        # Same answer for every unknown code so codes cannot be probed.
        raise NotFound("Invalid invite code")

    relink = bool(display.is_linked)
    display = set_display_linked(db, display, mint_access_token(), utcnow())
    if relink:
        logger.warning("Display %s re-linked; previous access token revoked", display.id)
    else:
        logger.info("Display %s linked", display.id)
    return display
