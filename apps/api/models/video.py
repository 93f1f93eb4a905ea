"""Video model for uploaded and recorded videos."""

from sqlalchemy import Boolean, Column, String, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from database import Base


class Video(Base):
    """Video stored in a workspace, optionally inside a folder."""
    
    __tablename__ = "videos"
    
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    work_space_id = Column(String, ForeignKey("work_spaces.id"), nullable=False, index=True)
    folder_id = Column(String, ForeignKey("folders.id"), nullable=True, index=True)
    title = Column(String, nullable=False, default="Untilted Video")
    description = Column(Text, nullable=False, default="No Description")
    source = Column(String, nullable=False)  # Object storage key or URL
    thumbnail = Column(String, nullable=True)
    processing = Column(Boolean, nullable=False, default=True)
    views = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    
    # Relationships
    user = relationship("User", back_populates="videos")
    workspace = relationship("WorkSpace", back_populates="videos")
    folder = relationship("Folder", back_populates="videos")
    analytics = relationship("VideoAnalytics", back_populates="video", cascade="all, delete-orphan")
    call_to_action = relationship("CallToAction", back_populates="video", uselist=False, cascade="all, delete-orphan")
