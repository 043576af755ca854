from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, JSON, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..db.base import Base


class Resume(Base):
    __tablename__ = "resumes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    file_name = Column(String(500), nullable=False)
    mime_type = Column(String(255))
    file_size = Column(Integer)
    # text produced by the document parser, after privacy filtering
    raw_text = Column(Text)
    # full parser output (education, skills, experience level, ...)
    parsed_content = Column(JSON)
    tech_keywords = Column(JSON, default=list)
    # [{name, description, technologies}]
    projects = Column(JSON, default=list)
    # [{company, position, duration, description}]
    work_experience = Column(JSON, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    user = relationship("User", back_populates="resumes")
    ai_profile = relationship(
        "AIProfile",
        back_populates="resume",
        uselist=False,
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Resume {self.id} {self.file_name}>"
