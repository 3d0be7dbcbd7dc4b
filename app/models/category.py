import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime
from app.database import Base

UNCATEGORIZED_NAME = "Uncategorized"


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), unique=True, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
