from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.logger import get_logger
from ..models.interview import Interview, InterviewReport, Question
from ..schemas.interview import QuestionType
from ..utils.exceptions import AIServiceUnavailableError, LLMError
from .ai_interviewer import InterviewAI

logger = get_logger(__name__)

TECHNICAL_TYPES = (
    QuestionType.CODING,
    QuestionType.ALGORITHM,
    QuestionType.TECHNICAL_KNOWLEDGE,
)
COMMUNICATION_TYPES = (QuestionType.BEHAVIORAL,)
SYSTEM_DESIGN_TYPES = (QuestionType.SYSTEM_DESIGN,)
PROBLEM_SOLVING_TYPES = (QuestionType.SCENARIO, QuestionType.ALGORITHM)


def _average(scores: List[float]) -> Optional[float]:
    if not scores:
        return None
    return sum(scores) / len(scores)


def category_score(questions: Iterable[Question], types) -> Optional[float]:
    return _average([q.score for q in questions if q.type in types and q.score is not None])


def interview_duration_minutes(interview: Interview) -> int:
    if not interview.started_at:
        return 0
    end = interview.completed_at or datetime.now(timezone.utc)
    start = interview.started_at
    # sqlite hands back naive datetimes
    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)
    if end.tzinfo is None:
        end = end.replace(tzinfo=timezone.utc)
    return max(0, round((end - start).total_seconds() / 60))


class ReportService:
    @staticmethod
    def build_aggregate(interview: Interview) -> Dict:
        """Deterministic report computed from the stored question scores."""
        all_questions = interview.questions
        answered = [q for q in all_questions if q.score is not None]
        overall = _average([q.score for q in answered])

        strengths: List[str] = []
        weaknesses: List[str] = []
        recommendations: List[str] = []
        if overall is not None:
            if overall >= 80:
                strengths.append("整体表现优秀")
            elif overall >= 60:
                strengths.append("基础知识扎实")
            if overall < 70:
                weaknesses.append("需要加强技术深度")
                recommendations.append("建议多做算法练习和系统设计题")

        return {
            "overall_score": overall if overall is not None else 0,
            "technical_score": category_score(answered, TECHNICAL_TYPES),
            "communication_score": category_score(answered, COMMUNICATION_TYPES),
            "system_design_score": category_score(answered, SYSTEM_DESIGN_TYPES),
            "problem_solving_score": category_score(answered, PROBLEM_SOLVING_TYPES),
            "strengths": strengths,
            "weaknesses": weaknesses,
            "recommendations": recommendations,
            "detailed_analysis": {
                "source": "aggregate",
                "totalQuestions": len(all_questions),
                "answeredQuestions": len(answered),
                "averageScore": overall if overall is not None else 0,
                "scoreDistribution": {
                    "excellent": sum(1 for q in answered if q.score >= 90),
                    "good": sum(1 for q in answered if 70 <= q.score < 90),
                    "basic": sum(1 for q in answered if q.score < 70),
                },
            },
        }

    @staticmethod
    def build_from_llm(interview: Interview, ai: InterviewAI) -> Dict:
        questions = interview.questions
        report = ai.generate_report(
            {
                "targetCompany": interview.target_company,
                "targetPosition": interview.target_position,
                "durationMinutes": interview_duration_minutes(interview),
            },
            [
                {
                    "type": getattr(q.type, "value", q.type),
                    "content": q.content,
                    "userAnswer": q.user_answer,
                }
                for q in questions
            ],
        )
        aggregate = ReportService.build_aggregate(interview)

        def score(key: str, fallback: Optional[float]) -> Optional[float]:
            try:
                return float(report[key])
            except (KeyError, TypeError, ValueError):
                return fallback

        def as_list(key: str) -> List:
            value = report.get(key)
            return value if isinstance(value, list) else []

        return {
            "overall_score": score("overallScore", aggregate["overall_score"]),
            "technical_score": score("technicalScore", aggregate["technical_score"]),
            "communication_score": score(
                "communicationScore", aggregate["communication_score"]
            ),
            "system_design_score": aggregate["system_design_score"],
            "problem_solving_score": score(
                "problemSolvingScore", aggregate["problem_solving_score"]
            ),
            "strengths": as_list("strengths"),
            "weaknesses": as_list("weaknesses"),
            "recommendations": as_list("recommendations"),
            "detailed_analysis": {
                "source": "ai",
                "hiringRecommendation": report.get("hiringRecommendation"),
                "questionScores": [
                    {"question": q.content, "score": q.score, "feedback": q.feedback}
                    for q in questions
                ],
            },
        }

    @staticmethod
    def save_report(
        db: Session, interview: Interview, fields: Dict, overwrite: bool = True
    ) -> InterviewReport:
        """
        Store the report of an interview, at most one per interview.

        The unique ``interview_id`` decides races: when a concurrent insert
        wins, the existing row is reused and, with ``overwrite``, updated.
        """
        report = (
            db.query(InterviewReport)
            .filter(InterviewReport.interview_id == interview.id)
            .first()
        )
        if report is None:
            report = InterviewReport(interview_id=interview.id, **fields)
            db.add(report)
            try:
                db.commit()
                db.refresh(report)
                return report
            except IntegrityError:
                db.rollback()
                logger.warning(
                    f"Report for interview {interview.id} already exists, reusing it"
                )
                report = (
                    db.query(InterviewReport)
                    .filter(InterviewReport.interview_id == interview.id)
                    .one()
                )

        if overwrite:
            for key, value in fields.items():
                setattr(report, key, value)
            db.commit()
            db.refresh(report)
        return report

    @staticmethod
    def generate_final_report(
        db: Session, interview: Interview, ai: InterviewAI
    ) -> InterviewReport:
        """LLM report for the interview, degraded to the aggregate on any LLM failure."""
        try:
            fields = ReportService.build_from_llm(interview, ai)
        except (AIServiceUnavailableError, LLMError) as e:
            logger.warning(
                f"LLM report for interview {interview.id} failed, using aggregate: {str(e)}"
            )
            fields = ReportService.build_aggregate(interview)
            fields["detailed_analysis"]["questionScores"] = [
                {"question": q.content, "score": q.score, "feedback": q.feedback}
                for q in interview.questions
            ]
        return ReportService.save_report(db, interview, fields)

    @staticmethod
    def serialize(report: InterviewReport, interview: Interview) -> Dict:
        analysis = report.detailed_analysis or {}
        return {
            "id": report.id,
            "overallScore": report.overall_score,
            "scores": {
                "technical": report.technical_score,
                "communication": report.communication_score,
                "problemSolving": report.problem_solving_score,
                "systemDesign": report.system_design_score,
            },
            "strengths": report.strengths or [],
            "improvements": report.weaknesses or [],
            "recommendations": report.recommendations or [],
            "hiringRecommendation": analysis.get("hiringRecommendation"),
            "source": analysis.get("source"),
            "questionAnalysis": [
                {
                    "question": q.content,
                    "type": getattr(q.type, "value", q.type),
                    "difficulty": getattr(q.difficulty, "value", q.difficulty),
                    "score": q.score,
                    "feedback": q.feedback,
                    "userAnswer": q.user_answer,
                }
                for q in interview.questions
            ],
        }
