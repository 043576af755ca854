from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Enum,
    Float,
    JSON,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..db.base import Base
from ..schemas.interview import (
    Difficulty,
    InterviewStatus,
    InterviewType,
    QuestionSource,
    QuestionType,
    RoundType,
)


def _enum_column(enum_cls):
    # store the lowercase value rather than the member name
    return Enum(
        enum_cls,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        length=32,
    )


class Interview(Base):
    __tablename__ = "interviews"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    job_position_id = Column(Integer, nullable=True)
    target_company = Column(String(255))
    target_position = Column(String(255))
    type = Column(_enum_column(InterviewType), default=InterviewType.TECHNICAL)
    status = Column(_enum_column(InterviewStatus), default=InterviewStatus.SCHEDULED)
    started_at = Column(DateTime(timezone=True))
    completed_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="interviews")
    rounds = relationship(
        "InterviewRound",
        back_populates="interview",
        cascade="all, delete-orphan",
        order_by="InterviewRound.round_number",
    )
    report = relationship(
        "InterviewReport",
        back_populates="interview",
        uselist=False,
        cascade="all, delete-orphan",
    )

    @property
    def questions(self):
        return [q for round_ in self.rounds for q in round_.questions]


class InterviewRound(Base):
    __tablename__ = "interview_rounds"

    id = Column(Integer, primary_key=True, index=True)
    interview_id = Column(
        Integer,
        ForeignKey("interviews.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    round_number = Column(Integer, nullable=False, default=1)
    type = Column(_enum_column(RoundType), default=RoundType.CODING)
    # set once every question in the round has an answer and a score
    score = Column(Float, nullable=True)
    feedback = Column(Text)

    interview = relationship("Interview", back_populates="rounds")
    questions = relationship(
        "Question",
        back_populates="round",
        cascade="all, delete-orphan",
        order_by="Question.order_index",
    )


class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    round_id = Column(
        Integer,
        ForeignKey("interview_rounds.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content = Column(Text, nullable=False)
    type = Column(_enum_column(QuestionType), default=QuestionType.TECHNICAL_KNOWLEDGE)
    difficulty = Column(_enum_column(Difficulty), default=Difficulty.MEDIUM)
    category = Column(String(255))
    source = Column(
        _enum_column(QuestionSource), nullable=False, default=QuestionSource.GENERATED
    )
    bank_category = Column(String(100), nullable=True)
    topics = Column(JSON, default=list)
    user_answer = Column(Text, nullable=True)
    # null: not attempted yet, otherwise a real answer or the failure placeholder
    model_answer = Column(Text, nullable=True)
    score = Column(Float, nullable=True)
    feedback = Column(Text, nullable=True)
    follow_ups = Column(JSON, default=list)
    order_index = Column(Integer, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    round = relationship("InterviewRound", back_populates="questions")

    def __repr__(self):
        return f"<Question {self.id} {self.source}>"


class InterviewReport(Base):
    __tablename__ = "interview_reports"

    id = Column(Integer, primary_key=True, index=True)
    interview_id = Column(
        Integer,
        ForeignKey("interviews.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    overall_score = Column(Float)
    technical_score = Column(Float, nullable=True)
    communication_score = Column(Float, nullable=True)
    system_design_score = Column(Float, nullable=True)
    problem_solving_score = Column(Float, nullable=True)
    strengths = Column(JSON, default=list)
    weaknesses = Column(JSON, default=list)
    recommendations = Column(JSON, default=list)
    detailed_analysis = Column(JSON)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    interview = relationship("Interview", back_populates="report")
