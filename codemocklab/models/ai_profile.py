from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    JSON,
    Float,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..db.base import Base


class AIProfile(Base):
    __tablename__ = "resume_ai_profiles"

    id = Column(Integer, primary_key=True, index=True)
    resume_id = Column(
        Integer,
        ForeignKey("resumes.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )

    experience_level = Column(String(50), default="mid")  # junior/mid/senior/lead
    experience_level_confidence = Column(Float, default=0.7)
    experience_reasoning = Column(Text)
    specializations = Column(JSON, default=list)
    tech_highlights = Column(JSON, default=list)
    career_suggestions = Column(JSON, default=list)
    role_matching_analysis = Column(JSON, default=dict)  # role -> percentage
    skill_assessment = Column(JSON, default=dict)  # dimension -> 0..100
    # category -> [question] or techDepth -> {tech -> [question]}; null if unavailable
    simulated_interview = Column(JSON, nullable=True)
    analysis_source = Column(String(20), default="ai")  # ai | fallback
    raw_analysis = Column(JSON)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    resume = relationship("Resume", back_populates="ai_profile")
    tech_stack = relationship(
        "TechStackItem",
        back_populates="profile",
        cascade="all, delete-orphan",
        order_by="TechStackItem.value_score.desc()",
    )
    project_analysis = relationship(
        "ProjectAnalysis", back_populates="profile", cascade="all, delete-orphan"
    )


class TechStackItem(Base):
    __tablename__ = "tech_stack_items"

    id = Column(Integer, primary_key=True, index=True)
    profile_id = Column(
        Integer,
        ForeignKey("resume_ai_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    technology = Column(String(255), nullable=False)
    category = Column(String(100))
    proficiency = Column(String(50))
    value_score = Column(Integer, default=0)
    evidence_count = Column(Integer, default=0)
    last_used = Column(String(100))

    profile = relationship("AIProfile", back_populates="tech_stack")

    def __repr__(self):
        return f"<TechStackItem {self.technology} {self.value_score}>"


class ProjectAnalysis(Base):
    __tablename__ = "project_analyses"

    id = Column(Integer, primary_key=True, index=True)
    profile_id = Column(
        Integer,
        ForeignKey("resume_ai_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    project_name = Column(String(500))
    description = Column(Text)
    tech_stack = Column(JSON, default=list)
    complexity = Column(String(50))
    impact = Column(Text)
    role = Column(String(255))
    highlights = Column(JSON, default=list)
    interview_questions = Column(JSON, default=list)

    profile = relationship("AIProfile", back_populates="project_analysis")
