"""Folder model."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base


class Folder(Base):
    """Named grouping of videos inside a workspace."""

    __tablename__ = "folders"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    work_space_id = Column(String, ForeignKey("work_spaces.id"), nullable=False, index=True)
    name = Column(String, nullable=False, default="Untitled")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    workspace = relationship("WorkSpace", back_populates="folders")
    videos = relationship("Video", back_populates="folder")
