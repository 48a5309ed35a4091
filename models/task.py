from sqlalchemy import Column, String, Text, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base

TASK_STATUSES = ("pending", "in-progress", "completed")


class Task(BaseModel, Base):
    __tablename__ = "tasks"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)  # max length enforced in schema
    status = Column(String(20), nullable=False, default="pending")

    user = relationship("User", back_populates="tasks")

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'in-progress', 'completed')",
            name="ck_tasks_status_valid",
        ),
        Index("ix_tasks_user_created", "user_id", "created_at"),
    )
