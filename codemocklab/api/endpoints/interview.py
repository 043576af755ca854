from typing import Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from ...core.auth import get_current_user
from ...core.config import Settings, get_settings
from ...core.logger import logger
from ...db.session import get_db
from ...dependencies.llm import get_interview_ai
from ...models.user import User
from ...schemas.interview import (
    EvaluateAnswerRequest,
    GenerateBestAnswersRequest,
    GenerateInterviewRequest,
    InterviewIdRequest,
    QuestionIdRequest,
    UpdateBestAnswerRequest,
)
from ...services.ai_interviewer import InterviewAI
from ...services.best_answer_service import BestAnswerService
from ...services.interview_service import InterviewService
from ...services.report_renderer import (
    attachment_header,
    render_interview_report,
    report_file_name,
)
from ...utils.exceptions import MissingFieldError

router = APIRouter()


@router.post("/generate")
def generate_interview(
    request: GenerateInterviewRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    ai: InterviewAI = Depends(get_interview_ai),
    settings: Settings = Depends(get_settings),
):
    result = InterviewService.generate(
        db, current_user, ai, settings, request.job_data, request.mode
    )
    return {"success": True, **result}


@router.post("/generate-realtime")
def generate_realtime_interview(
    request: GenerateInterviewRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    ai: InterviewAI = Depends(get_interview_ai),
    settings: Settings = Depends(get_settings),
):
    result = InterviewService.generate_realtime(
        db, current_user, ai, settings, request.job_data
    )
    return {"success": True, **result}


@router.post("/evaluate")
def evaluate_answer(
    request: EvaluateAnswerRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    ai: InterviewAI = Depends(get_interview_ai),
    settings: Settings = Depends(get_settings),
):
    result = InterviewService.evaluate(
        db,
        current_user,
        ai,
        settings,
        request.question_id,
        request.answer,
        request.interview_id,
    )
    return {"success": True, **result}


@router.post("/generate-best-answers")
def generate_best_answers(
    request: GenerateBestAnswersRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    result = InterviewService.queue_best_answers(
        db, current_user, request.interview_id, request.question_ids
    )
    return {"success": True, **result}


@router.post("/update-best-answer")
def update_best_answer(
    request: UpdateBestAnswerRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    ai: InterviewAI = Depends(get_interview_ai),
    settings: Settings = Depends(get_settings),
):
    question = BestAnswerService.get_owned_question(db, current_user.id, request.question_id)
    outcome = BestAnswerService.update_best_answer(
        db,
        ai,
        question,
        settings,
        question_type=request.question_type,
        difficulty=request.difficulty,
        topics=request.topics or None,
    )
    if outcome["updated"]:
        message = f"最佳答案已更新：{outcome['reason']}"
    elif outcome["reason"] == "对比失败":
        message = "AI对比失败，保持现有答案"
    else:
        message = f"保持现有答案：{outcome['reason']}"
    return {"success": True, "message": message, **outcome}


@router.post("/get-question-data")
def get_question_data(
    request: QuestionIdRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {
        "success": True,
        "question": InterviewService.get_question_data(db, current_user, request.question_id),
    }


@router.post("/report")
def generate_report(
    request: InterviewIdRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    ai: InterviewAI = Depends(get_interview_ai),
):
    report = InterviewService.final_report(db, current_user, ai, request.interview_id)
    return {"success": True, "report": report}


@router.get("/download-report")
def download_report(
    interview_id: Optional[int] = Query(None, alias="interviewId"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if interview_id is None:
        raise MissingFieldError("interviewId")

    interview = InterviewService.get_owned_interview(db, current_user.id, interview_id)
    html = render_interview_report(interview, current_user)
    logger.info(f"User {current_user.id} downloaded report of interview {interview_id}")
    return HTMLResponse(
        content=html,
        headers={
            "Content-Disposition": attachment_header(report_file_name("面试报告", current_user)),
            "Cache-Control": "no-cache",
        },
    )


@router.get("/{interview_id}")
def get_interview(
    interview_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    return {
        "success": True,
        **InterviewService.get_interview(db, current_user, interview_id, settings),
    }
