from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from loguru import logger
from sqlalchemy.orm import Session

from ...core.auth import get_current_user
from ...db.session import get_db
from ...models.user import User
from ...services.interview_service import InterviewService
from ...services.report_renderer import (
    attachment_header,
    render_all_questions_report,
    report_file_name,
)

router = APIRouter()


@router.get("/questions")
def get_all_questions(
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    return {"success": True, **InterviewService.dashboard_questions(db, current_user)}


@router.post("/download-all-reports")
def download_all_reports(
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    interviews = InterviewService.list_interviews(db, current_user)
    html = render_all_questions_report(interviews, current_user)
    logger.info(f"User {current_user.id} downloaded {len(interviews)} interview reports")
    return HTMLResponse(
        content=html,
        headers={
            "Content-Disposition": attachment_header(
                report_file_name("全部面试题目", current_user)
            ),
            "Cache-Control": "no-cache",
        },
    )
