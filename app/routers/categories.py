import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.auth import get_current_admin
from app.database import get_db
from app.models.category import Category
from app.models.video import Video
from app.schemas.auth import SuccessResponse
from app.schemas.category import CategoryCreate, CategoryResponse, CategoryWithCount
from app.services.catalog import category_counts

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("", response_model=list[CategoryWithCount])
def list_categories(db: Session = Depends(get_db)):
    """All categories by name, each with the number of videos in it."""
    counts = category_counts(db)
    items = db.query(Category).order_by(Category.name).all()
    return [
        CategoryWithCount(id=c.id, name=c.name, created_at=c.created_at, count=counts.get(c.id, 0))
        for c in items
    ]


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    body: CategoryCreate,
    _admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    name = body.name.strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Category name required")
    if db.query(Category).filter(Category.name == name).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Category already exists")
    category = Category(name=name)
    db.add(category)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Category already exists")
    db.refresh(category)
    logger.info("Category %s created: %s", category.id, category.name)
    return category


@router.delete("/{category_id}", response_model=SuccessResponse)
def delete_category(
    category_id: str,
    _admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Delete a category. Its videos stay, without a category."""
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    db.query(Video).filter(Video.category_id == category_id).update(
        {Video.category_id: None}, synchronize_session=False
    )
    db.delete(category)
    db.commit()
    logger.info("Category %s deleted", category_id)
    return SuccessResponse()
