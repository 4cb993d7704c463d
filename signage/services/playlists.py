from sqlalchemy.orm import Session

from signage.services.displays import get_assigned_playlist_items


def get_active_playlist(db: Session, display_id: str) -> list[dict]:
    rows = get_assigned_playlist_items(db, display_id)
    return [
        {
            "id": str(item.id),
            "playlist_id": str(item.playlist_id),
            "media_id": str(item.media_id),
            "order": item.order,
            "duration": item.duration,
            "created_at": item.created_at,
            "media": {
                "id": str(media.id),
                "name": media.name,
                "type": media.type,
                "filename": media.filename,
                "mime_type": media.mime_type,
                "file_size": media.file_size,
            },
        }
        for item, media in rows
    ]
