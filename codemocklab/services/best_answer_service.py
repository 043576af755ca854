import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import Settings
from ..core.constants import BEST_ANSWER_FAILED_PLACEHOLDER
from ..core.logger import get_logger
from ..models.interview import Interview, InterviewRound, Question
from ..utils.decorators import log_execution_time
from ..utils.exceptions import QuestionNotFoundError
from .ai_interviewer import InterviewAI

logger = get_logger(__name__)


def _enum_value(value) -> Optional[str]:
    return getattr(value, "value", value)


def has_usable_answer(model_answer: Optional[str]) -> bool:
    return bool(model_answer and model_answer.strip()) and (
        model_answer != BEST_ANSWER_FAILED_PLACEHOLDER
    )


class BestAnswerService:
    @staticmethod
    def get_owned_question(db: Session, user_id: int, question_id: int) -> Question:
        question = (
            db.query(Question)
            .join(InterviewRound, Question.round_id == InterviewRound.id)
            .join(Interview, InterviewRound.interview_id == Interview.id)
            .filter(Question.id == question_id, Interview.user_id == user_id)
            .first()
        )
        if question is None:
            raise QuestionNotFoundError()
        return question

    @staticmethod
    def pending_question_ids(db: Session, question_ids: List[int]) -> List[int]:
        if not question_ids:
            return []
        rows = (
            db.query(Question.id)
            .filter(Question.id.in_(question_ids), Question.model_answer.is_(None))
            .order_by(Question.id)
            .all()
        )
        return [row.id for row in rows]

    @staticmethod
    @log_execution_time
    def backfill(
        db: Session, ai: InterviewAI, question_ids: List[int], settings: Settings
    ) -> Dict[str, int]:
        """
        Generate model answers for questions that have none yet.

        Questions are processed in batches of ``BEST_ANSWER_BATCH_SIZE``
        concurrent LLM calls with ``BEST_ANSWER_BATCH_DELAY_SECONDS`` between
        batches. LLM calls run on worker threads; every database write stays
        on the calling thread. A failed generation stores the failure
        placeholder so the question is not retried forever.
        """
        pending = (
            db.query(Question)
            .filter(Question.id.in_(question_ids), Question.model_answer.is_(None))
            .order_by(Question.id)
            .all()
            if question_ids
            else []
        )
        # plain snapshots so worker threads never touch ORM instances
        jobs = [
            (
                q.id,
                q.content,
                _enum_value(q.type),
                _enum_value(q.difficulty),
                list(q.topics or []),
            )
            for q in pending
        ]
        by_id = {q.id: q for q in pending}

        def generate(job):
            _, content, question_type, difficulty, topics = job
            return ai.generate_best_answer(content, question_type, difficulty, topics)

        batch_size = max(1, settings.BEST_ANSWER_BATCH_SIZE)
        succeeded = failed = 0

        with ThreadPoolExecutor(max_workers=batch_size) as executor:
            for start in range(0, len(jobs), batch_size):
                batch = jobs[start : start + batch_size]
                futures = [(job[0], executor.submit(generate, job)) for job in batch]
                for question_id, future in futures:
                    try:
                        answer = future.result()
                        succeeded += 1
                    except Exception as e:
                        logger.error(
                            f"Best answer generation failed for question {question_id}: {str(e)}"
                        )
                        answer = BEST_ANSWER_FAILED_PLACEHOLDER
                        failed += 1
                    by_id[question_id].model_answer = answer
                db.commit()
                logger.info(
                    f"Best answer batch {start // batch_size + 1}: "
                    f"{len(batch)} questions, {succeeded} succeeded so far"
                )

                if start + batch_size < len(jobs):
                    time.sleep(settings.BEST_ANSWER_BATCH_DELAY_SECONDS)

        return {"total": len(jobs), "succeeded": succeeded, "failed": failed}

    @staticmethod
    def contribute_answer(
        db: Session,
        ai: InterviewAI,
        question: Question,
        candidate: str,
        settings: Settings,
    ) -> Dict:
        """
        Offer ``candidate`` as the question's model answer.

        A question without a usable model answer adopts the candidate
        directly. Otherwise the LLM compares the two and the candidate wins
        only when it is picked with confidence above
        ``BEST_ANSWER_REPLACE_CONFIDENCE``.
        """
        if not has_usable_answer(question.model_answer):
            question.model_answer = candidate
            db.commit()
            return {"updated": True, "reason": "首次生成", "confidenceScore": None}

        verdict = ai.compare_answers(question.content, question.model_answer, candidate)
        if verdict is None:
            return {"updated": False, "reason": "对比失败", "confidenceScore": None}

        try:
            confidence = float(verdict.get("confidenceScore") or 0)
        except (TypeError, ValueError):
            confidence = 0.0
        better = str(verdict.get("betterAnswer") or "").strip().upper()
        reason = verdict.get("reason") or ""
        improvements = verdict.get("improvements") or []

        if better == "B" and confidence > settings.BEST_ANSWER_REPLACE_CONFIDENCE:
            question.model_answer = candidate
            db.commit()
            logger.info(
                f"Replaced model answer of question {question.id} (confidence {confidence})"
            )
            return {
                "updated": True,
                "reason": reason,
                "confidenceScore": confidence,
                "improvements": improvements,
            }

        return {
            "updated": False,
            "reason": reason,
            "confidenceScore": confidence,
            "improvements": improvements,
        }

    @staticmethod
    def update_best_answer(
        db: Session,
        ai: InterviewAI,
        question: Question,
        settings: Settings,
        question_type: Optional[str] = None,
        difficulty: Optional[str] = None,
        topics: Optional[List[str]] = None,
    ) -> Dict:
        candidate = ai.generate_best_answer(
            question.content,
            question_type or _enum_value(question.type),
            difficulty or _enum_value(question.difficulty),
            topics if topics is not None else list(question.topics or []),
        )
        outcome = BestAnswerService.contribute_answer(db, ai, question, candidate, settings)
        outcome["bestAnswer"] = question.model_answer
        return outcome
