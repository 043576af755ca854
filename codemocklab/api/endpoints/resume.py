from typing import Optional
from fastapi import APIRouter, Depends, File, UploadFile
from loguru import logger
from sqlalchemy.orm import Session

from ...core.auth import get_current_user
from ...core.config import Settings, get_settings
from ...db.session import get_db
from ...dependencies.llm import get_interview_ai
from ...models.user import User
from ...schemas.resume import AnalyzeResumeRequest
from ...services.ai_interviewer import InterviewAI
from ...services.ai_profile_service import AIProfileService
from ...services.resume_service import ResumeService
from ...utils.exceptions import MissingFieldError

router = APIRouter()


@router.post("/upload")
def upload_resume(
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    ai: InterviewAI = Depends(get_interview_ai),
    settings: Settings = Depends(get_settings),
):
    if file is None:
        raise MissingFieldError("file")

    data = file.file.read()
    ResumeService.validate_upload(file.filename, file.content_type, len(data), settings)
    logger.info(
        f"Resume upload from user {current_user.id}: {file.filename} "
        f"({file.content_type}, {len(data)} bytes)"
    )

    result = ResumeService.upload_resume(
        db, current_user, file.filename, file.content_type, data, ai
    )
    return {"success": True, "data": result, "message": "简历上传成功"}


@router.get("/check")
def check_resume(
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    return ResumeService.summary(ResumeService.get_latest(db, current_user.id))


@router.get("/ai-profile/{resume_id}")
def get_ai_profile(
    resume_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    resume = ResumeService.get_owned(db, current_user.id, resume_id)
    if resume.ai_profile is None:
        return {
            "success": True,
            "data": {
                "hasAIProfile": False,
                "message": "AI分析结果不存在，请重新上传简历",
            },
            "message": "未找到AI分析结果",
        }

    return {
        "success": True,
        "data": {"hasAIProfile": True, **AIProfileService.serialize(resume.ai_profile)},
        "message": "AI分析结果获取成功",
    }


@router.post("/analyze")
def analyze_resume(
    request: AnalyzeResumeRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    ai: InterviewAI = Depends(get_interview_ai),
):
    resume = ResumeService.get_owned(db, current_user.id, request.resume_id)
    profile, metadata = ResumeService.analyze_and_save(db, resume, request.content, ai)
    return {
        "success": True,
        "data": {"aiProfile": AIProfileService.serialize(profile), "metadata": metadata},
        "message": "简历AI分析完成",
    }
