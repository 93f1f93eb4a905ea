"""WorkSpace model for tenant containers."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base


class WorkSpace(Base):
    """Container for folders and videos, personal or shared."""

    __tablename__ = "work_spaces"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False, default="PERSONAL")  # PERSONAL, PUBLIC
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="workspaces")
    members = relationship("Member", back_populates="workspace", cascade="all, delete-orphan")
    folders = relationship("Folder", back_populates="workspace", cascade="all, delete-orphan")
    videos = relationship("Video", back_populates="workspace")
    invites = relationship("Invite", back_populates="workspace", cascade="all, delete-orphan")
