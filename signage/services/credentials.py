import logging
import secrets
from typing import Callable

from signage.errors import Internal

logger = logging.getLogger(__name__)

INVITE_CODE_BYTES = 3
ACCESS_TOKEN_BYTES = 32
INVITE_CODE_MAX_ATTEMPTS = 5


def mint_invite_code() -> str:
    # 3 bytes -> 6 uppercase hex characters, easy to type on a TV remote.
    return secrets.token_hex(INVITE_CODE_BYTES).upper()


def mint_access_token() -> str:
    return secrets.token_hex(ACCESS_TOKEN_BYTES)


def generate_unique_invite_code(
    exists: Callable[[str], bool],
    attempts: int = INVITE_CODE_MAX_ATTEMPTS,
    mint: Callable[[], str] = mint_invite_code,
) -> str:
    for attempt in range(1, attempts + 1):
        candidate = mint()
        if not exists(candidate):
            return candidate
        logger.info("Invite code collision on attempt %d/%d", attempt, attempts)
    raise Internal("Could not allocate a unique invite code")
