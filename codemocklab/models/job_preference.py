from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Boolean,
    JSON,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..db.base import Base


class UserJobPreference(Base):
    __tablename__ = "user_job_preferences"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    company = Column(String(255))
    custom_company = Column(String(255))
    position = Column(String(255))
    level = Column(String(50))
    requirements = Column(Text)
    job_responsibilities = Column(JSON, default=list)
    job_requirements = Column(JSON, default=list)
    # at most one default per user, cleared before a new one is set
    is_default = Column(Boolean, default=False, nullable=False)
    usage_count = Column(Integer, default=1, nullable=False)
    last_used_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="job_preferences")

    def __repr__(self):
        return f"<UserJobPreference {self.company} {self.position}>"
