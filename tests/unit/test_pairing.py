import pytest

from signage.errors import Internal, NotFound, Unauthenticated, ValidationError
from signage.models.display import Display
from signage.services.auth import authenticate_token
from signage.services.credentials import INVITE_CODE_MAX_ATTEMPTS
from signage.services.displays import create_display
from signage.services.pairing import link_display


def test_new_display_starts_unlinked(db, operator):
    display = create_display(db, operator.id, "Lobby")
    assert display.is_linked is False
    assert display.access_token is None
    assert len(display.invite_code) == 6


def test_link_sets_token_and_check_in(db, operator):
    display = create_display(db, operator.id, "Lobby")

    linked = link_display(db, display.invite_code.lower())

    assert linked.id == display.id
    assert linked.is_linked is True
    assert linked.access_token and len(linked.access_token) == 64
    assert linked.last_check_in is not None
    assert authenticate_token(db, linked.access_token).id == display.id


def test_link_unknown_code_leaves_state_untouched(db, operator):
    display = create_display(db, operator.id, "Lobby")

    with pytest.raises(NotFound):
        link_display(db, "ZZZZZZ" if display.invite_code != "ZZZZZZ" else "YYYYYY")

    db.refresh(display)
    assert display.is_linked is False
    assert display.access_token is None


@pytest.mark.parametrize("code", [None, "", "   "])
def test_link_requires_a_code(db, code):
    with pytest.raises(ValidationError):
        link_display(db, code)


def test_relink_revokes_previous_token(db, operator):
    display = create_display(db, operator.id, "Lobby")
    first = link_display(db, display.invite_code).access_token

    second = link_display(db, display.invite_code).access_token

    assert first != second
    with pytest.raises(Unauthenticated):
        authenticate_token(db, first)
    assert authenticate_token(db, second).id == display.id
    # The invite code is kept for the lifetime of the display.
    assert db.get(Display, display.id).invite_code == display.invite_code


def test_tokens_are_unique_across_displays(db, operator):
    tokens = set()
    for name in ("A", "B", "C"):
        display = create_display(db, operator.id, name)
        tokens.add(link_display(db, display.invite_code).access_token)
    assert len(tokens) == 3


def test_empty_token_never_authenticates(db, operator):
    create_display(db, operator.id, "Unlinked")
    with pytest.raises(Unauthenticated):
        authenticate_token(db, "")


def test_create_display_gives_up_when_every_insert_collides(db, operator, monkeypatch):
    taken_code = create_display(db, operator.id, "Lobby").invite_code
    calls = []

    def colliding_code(exists, **kwargs):
        calls.append(taken_code)
        return taken_code

    monkeypatch.setattr("signage.services.displays.generate_unique_invite_code", colliding_code)

    with pytest.raises(Internal) as exc_info:
        create_display(db, operator.id, "Kitchen")

    assert exc_info.value.status_code == 500
    assert len(calls) == INVITE_CODE_MAX_ATTEMPTS
    assert db.query(Display).count() == 1
