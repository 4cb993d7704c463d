import base64
import os
from sqlalchemy.orm import Session
from signage.db import SessionLocal, Base, engine
from signage.models.user import User
from signage.models.display import Display
from signage.models.playlist import Playlist, PlaylistItem
from signage.models.schedule import Schedule
from signage.models.media import Media
from signage.services.displays import create_display
from signage.services.storage import MEDIA_DIR, ensure_storage

DEMO_ACCOUNT_ID = "demo-operator"


def seed() -> Display:
    Base.metadata.create_all(bind=engine)
    ensure_storage()
    db: Session = SessionLocal()
    try:
        user = db.get(User, DEMO_ACCOUNT_ID)
        if user is None:
            user = User(id=DEMO_ACCOUNT_ID, email="demo@example.com", first_name="Demo", role="client")
            db.add(user)
            db.commit()

        display = create_display(db, user.id, "Lobby")

        playlist = Playlist(name="Lobby Loop", client_id=user.id)
        db.add(playlist)
        db.commit()
        db.refresh(playlist)

        png_bytes = base64.b64decode(
            "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR4nGNgYAAAAAMAASsJTYQAAAAASUVORK5CYII="
        )
        for order, (filename, label) in enumerate(
            [("lobby_welcome.png", "Welcome Slide"), ("lobby_menu.png", "Menu Slide")], start=1
        ):
            with open(os.path.join(MEDIA_DIR, filename), "wb") as f:
                f.write(png_bytes)
            media = Media(
                name=label,
                type="image",
                filename=filename,
                file_size=len(png_bytes),
                mime_type="image/png",
                client_id=user.id,
            )
            db.add(media)
            db.commit()
            db.refresh(media)
            db.add(PlaylistItem(playlist_id=playlist.id, media_id=media.id, order=order, duration=10))
        db.commit()

        db.add(Schedule(display_id=display.id, playlist_id=playlist.id, always_on=True))
        display.assigned_playlist_id = playlist.id
        db.commit()
        db.refresh(display)
        print(f"Display '{display.name}' ready, invite code {display.invite_code}")
        return display
    finally:
        db.close()


if __name__ == "__main__":
    seed()
