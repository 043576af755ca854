import uuid
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum, JSON, Text
from sqlalchemy.sql import func
from ..db.base import Base
from ..schemas.task import TaskStatus, TaskType


class TaskRecord(Base):
    """Durable status of a background job queued from a request handler."""

    __tablename__ = "task_records"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True
    )
    task_type = Column(
        Enum(
            TaskType,
            values_callable=lambda members: [m.value for m in members],
            native_enum=False,
            length=32,
        ),
        nullable=False,
    )
    status = Column(
        Enum(
            TaskStatus,
            values_callable=lambda members: [m.value for m in members],
            native_enum=False,
            length=32,
        ),
        nullable=False,
        default=TaskStatus.PENDING,
    )
    payload = Column(JSON)
    result = Column(JSON)
    error = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
