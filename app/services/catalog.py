"""Category/video queries shared by the CRUD routers and the upload pipeline."""
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.category import Category, UNCATEGORIZED_NAME
from app.models.video import Video


def category_counts(db: Session) -> dict[str, int]:
    """category_id -> number of videos, grouped at read time."""
    rows = (
        db.query(Video.category_id, func.count(Video.id))
        .filter(Video.category_id.isnot(None))
        .group_by(Video.category_id)
        .all()
    )
    return {category_id: count for category_id, count in rows}


def ensure_default_category(db: Session) -> Category:
    """Return the "Uncategorized" category, creating it on first use. Caller must db.commit()."""
    category = db.query(Category).filter(Category.name == UNCATEGORIZED_NAME).first()
    if category:
        return category
    category = Category(name=UNCATEGORIZED_NAME)
    db.add(category)
    db.flush()
    return category


def next_display_order(db: Session) -> int:
    current = db.query(func.max(Video.display_order)).scalar()
    return (current or 0) + 1


def list_videos(db: Session, category_id: str | None = None) -> list[Video]:
    query = db.query(Video)
    if category_id:
        query = query.filter(Video.category_id == category_id)
    return query.order_by(Video.display_order.asc(), Video.created_at.desc()).all()


def create_video(
    db: Session,
    *,
    title: str,
    url: str,
    category_id: str | None = None,
    duration: str | None = None,
    storage_key: str | None = None,
) -> Video:
    """
    Insert a video row. Falls back to "Uncategorized" when no category is given.
    Raises LookupError for an unknown category_id. Caller must db.commit().
    """
    if category_id:
        if db.query(Category).filter(Category.id == category_id).first() is None:
            raise LookupError(category_id)
    else:
        category_id = ensure_default_category(db).id
    video = Video(
        title=title,
        url=url,
        category_id=category_id,
        duration=duration or "0:00",
        storage_key=storage_key,
        display_order=next_display_order(db),
    )
    db.add(video)
    db.flush()
    return video
