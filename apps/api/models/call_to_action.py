"""CallToAction model for end-of-video buttons."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base


class CallToAction(Base):
    """Clickable overlay attached to a video."""

    __tablename__ = "call_to_actions"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    video_id = Column(String, ForeignKey("videos.id"), nullable=False, unique=True, index=True)
    button_text = Column(String, nullable=False)
    button_link = Column(String, nullable=False)
    button_color = Column(String, nullable=False, default="#000000")
    text_color = Column(String, nullable=False, default="#ffffff")
    clicks = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    video = relationship("Video", back_populates="call_to_action")
