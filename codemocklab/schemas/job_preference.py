from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.constants import VALID_JOB_LEVELS


class JobPreferenceCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    company: str = Field(min_length=1, max_length=255)
    custom_company: Optional[str] = Field(default=None, alias="customCompany")
    position: str = Field(min_length=1, max_length=255)
    level: str = "mid"
    requirements: Optional[str] = None
    job_responsibilities: List[str] = Field(default=[], alias="jobResponsibilities")
    job_requirements: List[str] = Field(default=[], alias="jobRequirements")
    is_default: bool = Field(default=False, alias="isDefault")

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        level = value.strip().lower()
        if level not in VALID_JOB_LEVELS:
            raise ValueError(f"level must be one of: {', '.join(VALID_JOB_LEVELS)}")
        return level


class JobPreferenceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    company: Optional[str] = None
    custom_company: Optional[str] = Field(
        default=None, serialization_alias="customCompany"
    )
    position: Optional[str] = None
    level: Optional[str] = None
    requirements: Optional[str] = None
    job_responsibilities: List[str] = Field(
        default=[], serialization_alias="jobResponsibilities"
    )
    job_requirements: List[str] = Field(
        default=[], serialization_alias="jobRequirements"
    )
    is_default: bool = Field(default=False, serialization_alias="isDefault")
    usage_count: int = Field(default=0, serialization_alias="usageCount")
    last_used_at: Optional[datetime] = Field(
        default=None, serialization_alias="lastUsedAt"
    )
    created_at: Optional[datetime] = Field(default=None, serialization_alias="createdAt")

    @field_validator("job_responsibilities", "job_requirements", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return value or []
