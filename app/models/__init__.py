from app.models.category import Category, UNCATEGORIZED_NAME
from app.models.video import Video

__all__ = ["Category", "UNCATEGORIZED_NAME", "Video"]
