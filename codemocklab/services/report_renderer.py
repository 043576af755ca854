from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Dict, List
from urllib.parse import quote

import pytz
from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..core.constants import (
    ALL_QUESTIONS_REPORT_TEMPLATE,
    INTERVIEW_REPORT_TEMPLATE,
    REPORT_TIMEZONE,
)
from ..core.logger import get_logger
from ..models.interview import Interview, Question
from ..models.user import User
from ..schemas.interview import QuestionSource
from .best_answer_service import has_usable_answer

logger = get_logger(__name__)

template_dir = Path(__file__).parent.parent / "templates"
jinja_env = Environment(
    loader=FileSystemLoader(str(template_dir)),
    autoescape=select_autoescape(["html"]),
)
REPORT_TZ = pytz.timezone(REPORT_TIMEZONE)

SOURCE_LABELS = {QuestionSource.BANK: "AI题库", QuestionSource.GENERATED: "实时生成"}
PENDING_ANSWER_TEXT = "最佳答案生成中..."


def _local_time(value) -> str:
    if value is None:
        return "-"
    if value.tzinfo is None:
        value = pytz.utc.localize(value)
    return value.astimezone(REPORT_TZ).strftime("%Y-%m-%d %H:%M")


def _enum_value(value) -> str:
    return getattr(value, "value", value) or ""


def _question_row(number: int, question: Question) -> Dict:
    return {
        "number": number,
        "content": question.content,
        "type": _enum_value(question.type),
        "difficulty": _enum_value(question.difficulty),
        "category": question.category,
        "source": SOURCE_LABELS.get(question.source, "实时生成"),
        "is_bank": question.source == QuestionSource.BANK,
        "user_answer": question.user_answer,
        "score": question.score,
        "feedback": question.feedback,
        "best_answer": question.model_answer
        if has_usable_answer(question.model_answer)
        else question.model_answer or PENDING_ANSWER_TEXT,
    }


def _statistics(questions: List[Question]) -> Dict:
    scored = [q.score for q in questions if q.score is not None]
    answered = sum(1 for q in questions if q.user_answer)
    total = len(questions)
    return {
        "average_score": round(sum(scored) / len(scored)) if scored else 0,
        "answered_count": answered,
        "total_count": total,
        "completion_rate": round(answered / total * 100) if total else 0,
        "by_type": dict(Counter(_enum_value(q.type) for q in questions)),
        "by_difficulty": dict(Counter(_enum_value(q.difficulty) for q in questions)),
    }


def attachment_header(file_name: str) -> str:
    return f"attachment; filename*=UTF-8''{quote(file_name)}"


def render_interview_report(interview: Interview, user: User) -> str:
    questions = interview.questions
    report = interview.report
    template = jinja_env.get_template(INTERVIEW_REPORT_TEMPLATE)
    html = template.render(
        user_name=user.name or "用户",
        user_email=user.email,
        interview={
            "id": interview.id,
            "target_company": interview.target_company,
            "target_position": interview.target_position,
            "status": _enum_value(interview.status),
            "started_at": _local_time(interview.started_at),
            "completed_at": _local_time(interview.completed_at),
        },
        report=report,
        questions=[_question_row(i, q) for i, q in enumerate(questions, 1)],
        statistics=_statistics(questions),
        generated_at=datetime.now(REPORT_TZ).strftime("%Y-%m-%d %H:%M"),
    )
    logger.info(f"Rendered report for interview {interview.id} ({len(questions)} questions)")
    return html


def render_all_questions_report(interviews: List[Interview], user: User) -> str:
    sections = []
    all_questions: List[Question] = []
    for interview in interviews:
        questions = interview.questions
        if not questions:
            continue
        all_questions.extend(questions)
        sections.append(
            {
                "id": interview.id,
                "target_company": interview.target_company,
                "target_position": interview.target_position,
                "status": _enum_value(interview.status),
                "started_at": _local_time(interview.started_at or interview.created_at),
                "questions": [_question_row(i, q) for i, q in enumerate(questions, 1)],
                "statistics": _statistics(questions),
            }
        )

    template = jinja_env.get_template(ALL_QUESTIONS_REPORT_TEMPLATE)
    return template.render(
        user_name=user.name or "用户",
        user_email=user.email,
        interviews=sections,
        statistics=_statistics(all_questions),
        generated_at=datetime.now(REPORT_TZ).strftime("%Y-%m-%d %H:%M"),
    )


def report_file_name(prefix: str, user: User) -> str:
    return f"{prefix}_{user.name or '用户'}_{datetime.now(REPORT_TZ).strftime('%Y-%m-%d')}.html"
