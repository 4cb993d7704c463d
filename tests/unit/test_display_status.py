from datetime import datetime, timedelta

from signage.services.displays import ONLINE_WINDOW, derive_display_status

NOW = datetime(2026, 10, 17, 12, 0, 0)


def test_recent_check_in_is_online():
    assert derive_display_status(NOW - timedelta(minutes=9), NOW) == "online"


def test_stale_check_in_is_offline():
    assert derive_display_status(NOW - timedelta(minutes=11), NOW) == "offline"


def test_never_checked_in_is_offline():
    assert derive_display_status(None, NOW) == "offline"


def test_boundary_is_offline():
    assert ONLINE_WINDOW == timedelta(minutes=10)
    assert derive_display_status(NOW - ONLINE_WINDOW, NOW) == "offline"
