from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class InterviewType(str, Enum):
    TECHNICAL = "technical"
    BEHAVIORAL = "behavioral"
    SYSTEM_DESIGN = "system-design"


class InterviewStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class RoundType(str, Enum):
    CODING = "coding"
    BEHAVIORAL = "behavioral"
    SYSTEM_DESIGN = "system-design"


class QuestionType(str, Enum):
    CODING = "coding"
    ALGORITHM = "algorithm"
    TECHNICAL_KNOWLEDGE = "technical-knowledge"
    BEHAVIORAL = "behavioral"
    SYSTEM_DESIGN = "system-design"
    SCENARIO = "scenario"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"


class QuestionSource(str, Enum):
    GENERATED = "generated"
    BANK = "bank"


class ModelAnswerStatus(str, Enum):
    PENDING = "pending"
    AVAILABLE = "available"
    FAILED = "failed"


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class JobData(_CamelModel):
    company: str = ""
    position: str = ""
    level: str = "mid"
    requirements: List[str] = []
    job_responsibilities: List[str] = Field(default=[], alias="jobResponsibilities")
    job_requirements: List[str] = Field(default=[], alias="jobRequirements")


class GenerateInterviewRequest(_CamelModel):
    job_data: Optional[JobData] = Field(default=None, alias="jobData")
    mode: Optional[str] = None


class EvaluateAnswerRequest(_CamelModel):
    question_id: int = Field(alias="questionId")
    answer: str = Field(min_length=1)
    interview_id: Optional[int] = Field(default=None, alias="interviewId")


class InterviewIdRequest(_CamelModel):
    interview_id: int = Field(alias="interviewId")


class QuestionIdRequest(_CamelModel):
    question_id: int = Field(alias="questionId")


class UpdateBestAnswerRequest(_CamelModel):
    question_id: int = Field(alias="questionId")
    question_type: Optional[str] = Field(default=None, alias="questionType")
    difficulty: Optional[str] = None
    topics: List[str] = []


class GenerateBestAnswersRequest(_CamelModel):
    interview_id: Optional[int] = Field(default=None, alias="interviewId")
    question_ids: List[int] = Field(default=[], alias="questionIds")
