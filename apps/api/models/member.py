"""Member model linking users to shared workspaces."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base


class Member(Base):
    """Membership of a user in a workspace, with a per-workspace role."""

    __tablename__ = "members"
    __table_args__ = (UniqueConstraint("user_id", "work_space_id", name="uq_members_user_workspace"),)

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    work_space_id = Column(String, ForeignKey("work_spaces.id"), nullable=False, index=True)
    role = Column(String, nullable=False, default="MEMBER")  # MEMBER, ADMIN, SUPER_ADMIN
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="memberships")
    workspace = relationship("WorkSpace", back_populates="members")
