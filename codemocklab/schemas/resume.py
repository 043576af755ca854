from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.constants import RESUME_CONTENT_MAX_LENGTH, RESUME_CONTENT_MIN_LENGTH


class AnalyzeResumeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    resume_id: int = Field(alias="resumeId", gt=0)
    content: str

    @field_validator("content")
    @classmethod
    def validate_content(cls, value: str) -> str:
        length = len(value.strip())
        if length < RESUME_CONTENT_MIN_LENGTH:
            raise ValueError(
                f"Resume content must be at least {RESUME_CONTENT_MIN_LENGTH} characters"
            )
        if length > RESUME_CONTENT_MAX_LENGTH:
            raise ValueError(
                f"Resume content must be at most {RESUME_CONTENT_MAX_LENGTH} characters"
            )
        return value
