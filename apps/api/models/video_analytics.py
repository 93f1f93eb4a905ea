"""VideoAnalytics model for playback samples."""

from sqlalchemy import Column, String, DateTime, ForeignKey, Float
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from database import Base


class VideoAnalytics(Base):
    """One playback beacon reported by the player."""
    
    __tablename__ = "video_analytics"
    
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    video_id = Column(String, ForeignKey("videos.id"), nullable=False, index=True)
    watch_time = Column(Float, nullable=False, default=0.0)  # seconds
    watch_percentage = Column(Float, nullable=False, default=0.0)  # 0-100
    viewer_ip = Column(String, nullable=False, default="unknown", index=True)
    viewer_country = Column(String, nullable=False, default="unknown")
    viewed_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    
    # Relationships
    video = relationship("Video", back_populates="analytics")
