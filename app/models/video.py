"""Feed video. The binary lives in blob storage; this row only carries its public URL."""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base


class Video(Base):
    __tablename__ = "videos"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)
    url = Column(String(1024), nullable=False)
    storage_key = Column(String(512), nullable=True)  # null when url points outside our blob storage
    duration = Column(String(20), nullable=False, default="0:00")
    display_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    category = relationship("Category", lazy="joined")

    @property
    def category_name(self) -> str | None:
        return self.category.name if self.category else None
