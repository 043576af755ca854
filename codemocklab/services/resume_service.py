from typing import Dict, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import Settings
from ..core.constants import ALLOWED_RESUME_MIME_TYPES
from ..core.logger import get_logger
from ..models.ai_profile import AIProfile
from ..models.resume import Resume
from ..models.user import User
from ..schemas.task import TaskType
from ..utils.exceptions import (
    FileSizeExceededError,
    MissingFieldError,
    ResumeNotFoundError,
    UnsupportedFileTypeError,
)
from . import document_parser
from .ai_interviewer import InterviewAI
from .ai_profile_service import AIProfileService
from .privacy_filter import PrivacyFilter, ResumePreprocessor
from .task_service import TaskService

logger = get_logger(__name__)


class ResumeService:
    @staticmethod
    def validate_upload(
        file_name: Optional[str], mime_type: Optional[str], size: int, settings: Settings
    ) -> None:
        if not file_name:
            raise MissingFieldError("file")
        if mime_type not in ALLOWED_RESUME_MIME_TYPES:
            raise UnsupportedFileTypeError(["PDF", "DOC", "DOCX"])
        if size > settings.UPLOAD_MAX_SIZE:
            raise FileSizeExceededError(settings.UPLOAD_MAX_SIZE)

    @staticmethod
    def create_resume(
        db: Session, user: User, file_name: str, mime_type: str, data: bytes
    ) -> Resume:
        """Parse the document, strip personal data and persist the résumé."""
        raw_text = document_parser.extract_text(data, mime_type)
        filtered = PrivacyFilter.filter_resume_content(raw_text)
        parsed = document_parser.analyze_text(filtered.filtered_text)
        parsed["removedFields"] = filtered.removed_fields

        resume = Resume(
            user_id=user.id,
            file_name=file_name,
            mime_type=mime_type,
            file_size=len(data),
            raw_text=filtered.filtered_text,
            parsed_content=parsed,
            tech_keywords=parsed["techKeywords"],
            projects=parsed["projects"],
            work_experience=parsed["workExperience"],
        )
        try:
            db.add(resume)
            db.commit()
            db.refresh(resume)
        except Exception:
            db.rollback()
            raise
        logger.info(
            f"Stored resume {resume.id} for user {user.id} "
            f"({len(resume.tech_keywords or [])} tech keywords)"
        )
        return resume

    @staticmethod
    def analyze_and_save(
        db: Session, resume: Resume, content: str, ai: InterviewAI
    ) -> Tuple[AIProfile, Dict]:
        processed, metadata = ResumePreprocessor.preprocess_for_ai(content)
        logger.info(
            f"Analyzing resume {resume.id}: {metadata['originalLength']} -> "
            f"{metadata['filteredLength']} chars, removed {metadata['removedFields']}"
        )
        analysis, source = ai.analyze_resume(processed)
        profile = AIProfileService.upsert_profile(db, resume, analysis, source, metadata)
        return profile, metadata

    @staticmethod
    def upload_resume(
        db: Session,
        user: User,
        file_name: str,
        mime_type: str,
        data: bytes,
        ai: InterviewAI,
    ) -> Dict:
        resume = ResumeService.create_resume(db, user, file_name, mime_type, data)
        basic_analysis = {
            "techKeywords": resume.tech_keywords or [],
            "projects": resume.projects or [],
            "workExperience": resume.work_experience or [],
            "experienceLevel": resume.parsed_content.get("experienceLevel"),
            "skills": resume.parsed_content.get("skills", []),
        }

        # the upload itself has succeeded at this point
        try:
            profile, _ = ResumeService.analyze_and_save(db, resume, resume.raw_text, ai)
            ai_analysis = {
                "hasAIAnalysis": True,
                "source": profile.analysis_source,
                "profile": AIProfileService.serialize(profile),
            }
        except SQLAlchemyError as e:
            logger.error(f"Saving AI profile for resume {resume.id} failed: {str(e)}")
            db.rollback()
            record = TaskService.submit(
                db, TaskType.RESUME_ANALYSIS, {"resumeId": resume.id}, user_id=user.id
            )
            ai_analysis = {"hasAIAnalysis": False, "taskId": record.id}

        return {
            "resumeId": resume.id,
            "fileName": resume.file_name,
            "basicAnalysis": basic_analysis,
            "aiAnalysis": ai_analysis,
        }

    @staticmethod
    def get_latest(db: Session, user_id: int) -> Optional[Resume]:
        return (
            db.query(Resume)
            .filter(Resume.user_id == user_id)
            .order_by(Resume.created_at.desc(), Resume.id.desc())
            .first()
        )

    @staticmethod
    def get_owned(db: Session, user_id: int, resume_id: int) -> Resume:
        resume = (
            db.query(Resume)
            .filter(Resume.id == resume_id, Resume.user_id == user_id)
            .first()
        )
        if resume is None:
            raise ResumeNotFoundError()
        return resume

    @staticmethod
    def summary(resume: Optional[Resume]) -> Dict:
        if resume is None:
            return {"hasResume": False, "resume": None}
        return {
            "hasResume": True,
            "resume": {
                "id": resume.id,
                "fileName": resume.file_name,
                "createdAt": resume.created_at.isoformat() if resume.created_at else None,
                "techKeywords": resume.tech_keywords or [],
                "projects": resume.projects or [],
                "workExperience": resume.work_experience or [],
                "hasAIProfile": resume.ai_profile is not None,
            },
        }
