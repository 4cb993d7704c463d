from signage.models.media import Media
from signage.models.playlist import Playlist, PlaylistItem
from signage.services.displays import create_display, update_display_playlist
from signage.services.playlists import get_active_playlist


def _media(db, client_id, name, type_="image"):
    media = Media(
        name=name,
        type=type_,
        filename=f"{name}.bin",
        file_size=10,
        mime_type="image/png" if type_ == "image" else "video/mp4",
        client_id=client_id,
    )
    db.add(media)
    db.commit()
    return media


def test_unassigned_display_has_empty_playlist(db, operator):
    display = create_display(db, operator.id, "Lobby")
    assert get_active_playlist(db, display.id) == []


def test_unknown_display_has_empty_playlist(db):
    assert get_active_playlist(db, "does-not-exist") == []


def test_items_come_back_in_order_with_media(db, operator):
    display = create_display(db, operator.id, "Lobby")
    playlist = Playlist(name="Loop", client_id=operator.id)
    db.add(playlist)
    db.commit()
    intro = _media(db, operator.id, "intro")
    clip = _media(db, operator.id, "clip", type_="video")
    outro = _media(db, operator.id, "outro")
    db.add_all(
        [
            PlaylistItem(playlist_id=playlist.id, media_id=outro.id, order=3, duration=5),
            PlaylistItem(playlist_id=playlist.id, media_id=intro.id, order=1, duration=8),
            PlaylistItem(playlist_id=playlist.id, media_id=clip.id, order=2),
        ]
    )
    db.commit()
    update_display_playlist(db, display.id, playlist.id)

    items = get_active_playlist(db, display.id)

    assert [item["media"]["name"] for item in items] == ["intro", "clip", "outro"]
    assert [item["order"] for item in items] == [1, 2, 3]
    assert items[0]["duration"] == 8
    assert items[1]["media"]["type"] == "video"
    assert items[1]["media"]["filename"] == "clip.bin"


def test_reassignment_is_reflected_immediately(db, operator):
    display = create_display(db, operator.id, "Lobby")
    first = Playlist(name="First", client_id=operator.id)
    second = Playlist(name="Second", client_id=operator.id)
    db.add_all([first, second])
    db.commit()
    media = _media(db, operator.id, "only")
    db.add(PlaylistItem(playlist_id=second.id, media_id=media.id, order=1))
    db.commit()

    update_display_playlist(db, display.id, first.id)
    assert get_active_playlist(db, display.id) == []

    update_display_playlist(db, display.id, second.id)
    assert [item["media"]["name"] for item in get_active_playlist(db, display.id)] == ["only"]
