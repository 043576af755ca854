from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import Settings
from ..core.constants import (
    BANK_CATEGORIES,
    BEST_ANSWER_FAILED_PLACEHOLDER,
    DEFAULT_QUESTION_CATEGORY,
    FOLLOW_UP_SCORE_RANGE,
    INTERVIEW_MODE_BANK_ONLY,
    REALTIME_CATEGORY,
    TECH_DEPTH_CATEGORY,
    TECH_DEPTH_LABEL,
)
from ..core.logger import get_logger
from ..models.interview import Interview, InterviewRound, Question
from ..models.resume import Resume
from ..models.user import User
from ..schemas.interview import (
    Difficulty,
    InterviewStatus,
    InterviewType,
    JobData,
    ModelAnswerStatus,
    QuestionSource,
    QuestionType,
    RoundType,
)
from ..schemas.task import TaskType
from ..utils.exceptions import (
    AIServiceUnavailableError,
    InterviewNotFoundError,
    InvalidInputError,
    LLMError,
    QuestionNotFoundError,
)
from .ai_interviewer import InterviewAI
from .ai_profile_service import AIProfileService
from .best_answer_service import BestAnswerService
from .report_service import ReportService
from .resume_service import ResumeService
from .task_service import TaskService

logger = get_logger(__name__)

QUESTION_TYPE_ALIASES = {
    "coding": QuestionType.CODING,
    "code": QuestionType.CODING,
    "algorithm": QuestionType.ALGORITHM,
    "system-design": QuestionType.SYSTEM_DESIGN,
    "system_design": QuestionType.SYSTEM_DESIGN,
    "systemdesign": QuestionType.SYSTEM_DESIGN,
    "behavioral": QuestionType.BEHAVIORAL,
    "scenario": QuestionType.SCENARIO,
}
DIFFICULTY_ALIASES = {
    "easy": Difficulty.EASY,
    "simple": Difficulty.EASY,
    "medium": Difficulty.MEDIUM,
    "mid": Difficulty.MEDIUM,
    "hard": Difficulty.HARD,
    "difficult": Difficulty.HARD,
    "expert": Difficulty.EXPERT,
    "very hard": Difficulty.EXPERT,
}


def map_question_type(value: Optional[str]) -> QuestionType:
    """LLM question type to the stored enum; anything unknown is technical knowledge."""
    return QUESTION_TYPE_ALIASES.get(
        str(value or "").strip().lower(), QuestionType.TECHNICAL_KNOWLEDGE
    )


def map_difficulty(value: Optional[str]) -> Difficulty:
    return DIFFICULTY_ALIASES.get(str(value or "").strip().lower(), Difficulty.MEDIUM)


def model_answer_status(model_answer: Optional[str]) -> ModelAnswerStatus:
    if model_answer is None:
        return ModelAnswerStatus.PENDING
    if model_answer == BEST_ANSWER_FAILED_PLACEHOLDER:
        return ModelAnswerStatus.FAILED
    return ModelAnswerStatus.AVAILABLE


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def _string_list(value) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item]


def _bank_entries(value) -> List:
    # a category answered with one bare string still counts as one question
    if isinstance(value, str):
        return [value]
    return value if isinstance(value, list) else []


def bank_questions(simulated_interview: Optional[Dict]) -> List[Dict]:
    """Flatten a stored question bank into question specs, in category order."""
    if not isinstance(simulated_interview, dict):
        return []

    specs = []
    for key, question_type, label in BANK_CATEGORIES:
        for content in _bank_entries(simulated_interview.get(key)):
            if not isinstance(content, str) or not content.strip():
                continue
            specs.append(
                {
                    "content": content.strip(),
                    "type": map_question_type(question_type),
                    "difficulty": Difficulty.MEDIUM,
                    "topics": [label],
                    "category": label,
                    "source": QuestionSource.BANK,
                    "bank_category": key,
                    "follow_ups": [],
                }
            )

    tech_depth = simulated_interview.get(TECH_DEPTH_CATEGORY)
    if isinstance(tech_depth, dict):
        for tech, questions in tech_depth.items():
            for content in _bank_entries(questions):
                if not isinstance(content, str) or not content.strip():
                    continue
                topics = [tech, TECH_DEPTH_LABEL]
                specs.append(
                    {
                        "content": content.strip(),
                        "type": QuestionType.TECHNICAL_KNOWLEDGE,
                        "difficulty": Difficulty.HARD,
                        "topics": topics,
                        "category": ", ".join(topics),
                        "source": QuestionSource.BANK,
                        "bank_category": TECH_DEPTH_CATEGORY,
                        "follow_ups": [],
                    }
                )
    return specs


def generated_question_spec(question: Dict, category: Optional[str] = None) -> Dict:
    topics = _string_list(question.get("topics"))
    return {
        "content": str(question["content"]).strip(),
        "type": map_question_type(question.get("type")),
        "difficulty": map_difficulty(question.get("difficulty")),
        "topics": topics,
        "category": category or (", ".join(topics) if topics else DEFAULT_QUESTION_CATEGORY),
        "source": QuestionSource.GENERATED,
        "bank_category": None,
        "follow_ups": _string_list(question.get("followUps")),
    }


def resume_profile_payload(resume: Resume) -> Dict:
    parsed = resume.parsed_content or {}
    return {
        "techKeywords": resume.tech_keywords or [],
        "experienceLevel": parsed.get("experienceLevel") or "MID",
        "projects": resume.projects or [],
        "workExperience": resume.work_experience or [],
    }


def question_brief(question: Question) -> Dict:
    return {
        "id": question.id,
        "content": question.content,
        "type": question.type.value,
        "difficulty": question.difficulty.value,
        "category": question.category,
        "source": question.source.value,
        "originalCategory": question.bank_category,
        "topics": question.topics or [],
    }


def question_detail(question: Question) -> Dict:
    has_answer = bool(question.user_answer and question.user_answer.strip())
    return {
        **question_brief(question),
        "userAnswer": question.user_answer,
        "modelAnswer": question.model_answer,
        "modelAnswerStatus": model_answer_status(question.model_answer).value,
        "score": question.score,
        "feedback": question.feedback,
        "followUps": question.follow_ups or [],
        "hasAnswer": has_answer,
        "hasEvaluation": question.score is not None and bool(question.feedback),
        "createdAt": _iso(question.created_at),
        "updatedAt": _iso(question.updated_at),
    }


class InterviewService:
    # ------------------------------------------------------------------
    # generation
    # ------------------------------------------------------------------
    @staticmethod
    def _latest_resume(db: Session, user: User) -> Resume:
        resume = ResumeService.get_latest(db, user.id)
        if resume is None:
            raise InvalidInputError("请先上传简历", code="RESUME_REQUIRED")
        return resume

    @staticmethod
    def _create_interview(
        db: Session, user: User, job: JobData, specs: List[Dict]
    ) -> Tuple[Interview, List[Question]]:
        try:
            interview = Interview(
                user_id=user.id,
                target_company=job.company or None,
                target_position=job.position or None,
                type=InterviewType.TECHNICAL,
                status=InterviewStatus.IN_PROGRESS,
                started_at=datetime.now(timezone.utc),
            )
            round_ = InterviewRound(round_number=1, type=RoundType.CODING)
            interview.rounds.append(round_)
            questions = [
                Question(
                    content=spec["content"],
                    type=spec["type"],
                    difficulty=spec["difficulty"],
                    category=spec["category"],
                    source=spec["source"],
                    bank_category=spec["bank_category"],
                    topics=spec["topics"],
                    follow_ups=spec["follow_ups"],
                    order_index=index,
                )
                for index, spec in enumerate(specs)
            ]
            round_.questions.extend(questions)
            db.add(interview)
            db.commit()
            db.refresh(interview)
        except Exception:
            db.rollback()
            raise
        logger.info(
            f"Created interview {interview.id} for user {user.id} with {len(questions)} questions"
        )
        return interview, questions

    @staticmethod
    def _queue_backfill(db: Session, user: User, interview: Interview, questions: List[Question]):
        return TaskService.submit(
            db,
            TaskType.BEST_ANSWERS,
            {"interviewId": interview.id, "questionIds": [q.id for q in questions]},
            user_id=user.id,
        )

    @staticmethod
    def generate(
        db: Session,
        user: User,
        ai: InterviewAI,
        settings: Settings,
        job: Optional[JobData] = None,
        mode: Optional[str] = None,
    ) -> Dict:
        job = job or JobData()
        resume = InterviewService._latest_resume(db, user)
        profile = resume.ai_profile
        ai_profile = AIProfileService.serialize(profile) if profile else None

        generated: List[Dict] = []
        if mode != INTERVIEW_MODE_BANK_ONLY:
            generated = [
                generated_question_spec(q)
                for q in ai.generate_questions(
                    resume_profile_payload(resume),
                    job.model_dump(by_alias=True),
                    ai_profile,
                    settings.BANK_GENERATED_QUESTION_COUNT,
                )
            ]

        bank = bank_questions(profile.simulated_interview if profile else None)
        if mode == INTERVIEW_MODE_BANK_ONLY and not bank:
            raise InvalidInputError(
                "当前简历没有可用的AI题库，请先完成简历AI分析", code="QUESTION_BANK_EMPTY"
            )
        logger.info(
            f"Interview questions for user {user.id}: {len(generated)} generated, {len(bank)} from bank"
        )

        interview, questions = InterviewService._create_interview(
            db, user, job, generated + bank
        )
        task = InterviewService._queue_backfill(db, user, interview, questions)

        return {
            "interviewId": interview.id,
            "questions": [question_brief(q) for q in questions],
            "mode": mode or "mixed",
            "generatedCount": len(generated),
            "bankQuestionCount": len(bank),
            "duration": settings.interview_duration(),
            "taskId": task.id,
        }

    @staticmethod
    def generate_realtime(
        db: Session,
        user: User,
        ai: InterviewAI,
        settings: Settings,
        job: Optional[JobData] = None,
    ) -> Dict:
        job = job or JobData()
        resume = InterviewService._latest_resume(db, user)
        ai_profile = None
        if resume.ai_profile:
            ai_profile = AIProfileService.serialize(resume.ai_profile)
            # realtime interviews never draw on the stored bank
            ai_profile.pop("simulatedInterview", None)

        specs = [
            generated_question_spec(q, category=REALTIME_CATEGORY)
            for q in ai.generate_questions(
                resume_profile_payload(resume),
                job.model_dump(by_alias=True),
                ai_profile,
                settings.REALTIME_QUESTION_COUNT,
            )
        ]
        interview, questions = InterviewService._create_interview(db, user, job, specs)
        task = InterviewService._queue_backfill(db, user, interview, questions)

        return {
            "interviewId": interview.id,
            "questions": [question_brief(q) for q in questions],
            "mode": "ai-generate",
            "generatedCount": len(questions),
            "duration": settings.interview_duration(),
            "taskId": task.id,
        }

    # ------------------------------------------------------------------
    # answering
    # ------------------------------------------------------------------
    @staticmethod
    def evaluate(
        db: Session,
        user: User,
        ai: InterviewAI,
        settings: Settings,
        question_id: int,
        answer: str,
        interview_id: Optional[int] = None,
    ) -> Dict:
        question = BestAnswerService.get_owned_question(db, user.id, question_id)
        round_ = question.round
        if interview_id is not None and round_.interview_id != interview_id:
            raise QuestionNotFoundError()
        resubmission = bool(question.user_answer and question.user_answer.strip())

        evaluation = ai.evaluate_answer(question.content, answer, question.type.value)
        score = evaluation["score"]

        question.user_answer = answer
        question.score = score
        question.feedback = evaluation["feedback"]

        follow_up = None
        low, high = FOLLOW_UP_SCORE_RANGE
        if low < score < high:
            try:
                follow_up = ai.generate_follow_up(question.content, answer) or None
            except (LLMError, AIServiceUnavailableError) as e:
                logger.warning(f"Follow-up generation failed for question {question.id}: {str(e)}")
            if follow_up:
                question.follow_ups = list(question.follow_ups or []) + [follow_up]
        db.commit()

        # recheck the whole round on every write
        round_questions = (
            db.query(Question)
            .filter(Question.round_id == round_.id)
            .order_by(Question.order_index, Question.id)
            .all()
        )
        round_completed = all(
            q.user_answer and q.score is not None for q in round_questions
        )
        if round_completed:
            InterviewService._complete_round(db, round_, round_questions)

        best_answer_updated = False
        if resubmission and score >= settings.BEST_ANSWER_CONTRIBUTION_MIN_SCORE:
            try:
                outcome = BestAnswerService.contribute_answer(
                    db, ai, question, answer, settings
                )
                best_answer_updated = outcome["updated"]
            except (LLMError, AIServiceUnavailableError) as e:
                logger.warning(f"Answer contribution failed for question {question.id}: {str(e)}")

        next_question_id = None
        if not round_completed:
            ids = [q.id for q in round_questions]
            position = ids.index(question.id)
            next_question_id = next(
                (q.id for q in round_questions[position + 1 :] if not q.user_answer),
                None,
            )

        return {
            "evaluation": {
                "score": score,
                "feedback": evaluation["feedback"],
                "strengths": evaluation["strengths"],
                "improvements": evaluation["improvements"],
                "suggestions": evaluation["suggestions"],
            },
            "followUp": follow_up,
            "roundCompleted": round_completed,
            "nextQuestionId": next_question_id,
            "bestAnswerUpdated": best_answer_updated,
        }

    @staticmethod
    def _complete_round(db: Session, round_: InterviewRound, questions: List[Question]):
        average = sum(q.score for q in questions) / len(questions)
        round_.score = average
        round_.feedback = f"本轮面试平均得分: {average:.1f}分"

        interview = round_.interview
        if interview.status == InterviewStatus.COMPLETED:
            db.commit()
            return

        interview.status = InterviewStatus.COMPLETED
        interview.completed_at = datetime.now(timezone.utc)
        db.commit()
        logger.info(f"Interview {interview.id} completed, average {average:.1f}")
        ReportService.save_report(
            db, interview, ReportService.build_aggregate(interview), overwrite=False
        )

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------
    @staticmethod
    def get_owned_interview(db: Session, user_id: int, interview_id: int) -> Interview:
        interview = (
            db.query(Interview)
            .filter(Interview.id == interview_id, Interview.user_id == user_id)
            .first()
        )
        if interview is None:
            raise InterviewNotFoundError()
        return interview

    @staticmethod
    def get_interview(db: Session, user: User, interview_id: int, settings: Settings) -> Dict:
        interview = InterviewService.get_owned_interview(db, user.id, interview_id)
        return {
            "interview": {
                "id": interview.id,
                "type": interview.type.value,
                "status": interview.status.value,
                "targetCompany": interview.target_company,
                "targetPosition": interview.target_position,
                "startedAt": _iso(interview.started_at),
                "completedAt": _iso(interview.completed_at),
                "createdAt": _iso(interview.created_at),
                "hasReport": interview.report is not None,
            },
            "questions": [question_detail(q) for q in interview.questions],
            "duration": settings.interview_duration(),
        }

    @staticmethod
    def get_question_data(db: Session, user: User, question_id: int) -> Dict:
        question = BestAnswerService.get_owned_question(db, user.id, question_id)
        return question_detail(question)

    @staticmethod
    def dashboard_questions(db: Session, user: User) -> Dict:
        rows = (
            db.query(Question, Interview)
            .join(InterviewRound, Question.round_id == InterviewRound.id)
            .join(Interview, InterviewRound.interview_id == Interview.id)
            .filter(Interview.user_id == user.id)
            .order_by(Question.created_at.desc(), Question.id.desc())
            .all()
        )

        questions = []
        by_difficulty: Dict[str, int] = {}
        by_category: Dict[str, int] = {}
        by_source: Dict[str, int] = {}
        for question, interview in rows:
            item = question_detail(question)
            item["interview"] = {
                "id": interview.id,
                "targetCompany": interview.target_company or "未知公司",
                "targetPosition": interview.target_position or "未知职位",
                "createdAt": _iso(interview.created_at),
            }
            questions.append(item)
            by_difficulty[item["difficulty"]] = by_difficulty.get(item["difficulty"], 0) + 1
            category = item["category"] or DEFAULT_QUESTION_CATEGORY
            by_category[category] = by_category.get(category, 0) + 1
            by_source[item["source"]] = by_source.get(item["source"], 0) + 1

        scored = [q["score"] for q in questions if q["score"] is not None]
        return {
            "questions": questions,
            "stats": {
                "totalQuestions": len(questions),
                "answeredQuestions": sum(1 for q in questions if q["hasAnswer"]),
                "avgScore": sum(scored) / len(scored) if scored else 0,
                "byDifficulty": by_difficulty,
                "byCategory": by_category,
                "bySource": by_source,
            },
        }

    @staticmethod
    def list_interviews(db: Session, user: User) -> List[Interview]:
        return (
            db.query(Interview)
            .filter(Interview.user_id == user.id)
            .order_by(Interview.created_at.desc(), Interview.id.desc())
            .all()
        )

    # ------------------------------------------------------------------
    # reports and best answers
    # ------------------------------------------------------------------
    @staticmethod
    def final_report(db: Session, user: User, ai: InterviewAI, interview_id: int) -> Dict:
        interview = InterviewService.get_owned_interview(db, user.id, interview_id)
        if interview.status != InterviewStatus.COMPLETED:
            interview.status = InterviewStatus.COMPLETED
            interview.completed_at = datetime.now(timezone.utc)
            db.commit()
        report = ReportService.generate_final_report(db, interview, ai)
        return ReportService.serialize(report, interview)

    @staticmethod
    def queue_best_answers(
        db: Session,
        user: User,
        interview_id: Optional[int] = None,
        question_ids: Optional[List[int]] = None,
    ) -> Dict:
        """
        Queue model answer generation for the requested questions.

        Questions holding the failure placeholder are reset so they are
        generated again; questions with a real answer are left alone.
        """
        if interview_id is None and not question_ids:
            raise InvalidInputError("需要提供 interviewId 或 questionIds")

        query = (
            db.query(Question)
            .join(InterviewRound, Question.round_id == InterviewRound.id)
            .join(Interview, InterviewRound.interview_id == Interview.id)
            .filter(Interview.user_id == user.id)
        )
        if interview_id is not None:
            InterviewService.get_owned_interview(db, user.id, interview_id)
            query = query.filter(Interview.id == interview_id)
        if question_ids:
            query = query.filter(Question.id.in_(question_ids))
        questions = query.order_by(Question.id).all()

        pending = []
        for question in questions:
            if question.model_answer == BEST_ANSWER_FAILED_PLACEHOLDER:
                question.model_answer = None
            if question.model_answer is None:
                pending.append(question.id)
        db.commit()

        if not pending:
            return {"queuedCount": 0, "taskId": None}

        task = TaskService.submit(
            db,
            TaskType.BEST_ANSWERS,
            {"interviewId": interview_id, "questionIds": pending},
            user_id=user.id,
        )
        return {"queuedCount": len(pending), "taskId": task.id}
