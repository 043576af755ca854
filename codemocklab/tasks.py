# tasks.py
from typing import List, Optional

from loguru import logger

from .core.celery_app import celery_app
from .core.config import get_settings
from .db.session import SessionLocal
from .models.resume import Resume
from .services.ai_interviewer import InterviewAI
from .services.best_answer_service import BestAnswerService
from .services.llm_client import DeepSeekClient
from .services.resume_service import ResumeService
from .services.task_service import TaskService


def _interview_ai() -> InterviewAI:
    settings = get_settings()
    client = DeepSeekClient(settings) if settings.DEEPSEEK_API_KEY else None
    return InterviewAI(client, settings)


@celery_app.task(name="codemocklab.tasks.generate_best_answers", bind=True)
def generate_best_answers_task(self, task_id: str, question_ids: List[int]):
    """Celery task to backfill model answers for freshly created questions"""
    db = SessionLocal()
    try:
        TaskService.mark_running(db, task_id)
        logger.info(f"Starting best answer backfill {task_id} for {len(question_ids)} questions")
        result = BestAnswerService.backfill(db, _interview_ai(), question_ids, get_settings())
        TaskService.mark_succeeded(db, task_id, result)
        logger.info(f"Best answer backfill {task_id} finished: {result}")
        return result

    except Exception as e:
        logger.error(f"Best answer backfill {task_id} failed: {str(e)}")
        db.rollback()
        TaskService.mark_failed(db, task_id, str(e))
        raise

    finally:
        db.close()


@celery_app.task(name="codemocklab.tasks.analyze_resume", bind=True)
def analyze_resume_task(self, task_id: str, resume_id: Optional[int]):
    """Celery task to retry AI analysis of a stored résumé"""
    db = SessionLocal()
    try:
        TaskService.mark_running(db, task_id)
        resume = db.query(Resume).filter(Resume.id == resume_id).first()
        if resume is None:
            TaskService.mark_failed(db, task_id, f"Resume {resume_id} not found")
            return None

        profile, metadata = ResumeService.analyze_and_save(
            db, resume, resume.raw_text or "", _interview_ai()
        )
        result = {
            "resumeId": resume.id,
            "profileId": profile.id,
            "source": profile.analysis_source,
            "removedFields": metadata["removedFields"],
        }
        TaskService.mark_succeeded(db, task_id, result)
        logger.info(f"Resume analysis {task_id} finished ({profile.analysis_source})")
        return result

    except Exception as e:
        logger.error(f"Resume analysis {task_id} failed: {str(e)}")
        db.rollback()
        TaskService.mark_failed(db, task_id, str(e))
        raise

    finally:
        db.close()
