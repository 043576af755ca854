from typing import Any, Dict, Optional
from sqlalchemy.orm import Session

from ..core.logger import get_logger
from ..models.task_record import TaskRecord
from ..schemas.task import TaskStatus, TaskType
from ..utils.exceptions import NotFoundError

logger = get_logger(__name__)


class TaskService:
    """Bookkeeping for Celery jobs queued from request handlers."""

    @staticmethod
    def create_task(
        db: Session,
        task_type: TaskType,
        payload: Dict[str, Any],
        user_id: Optional[int] = None,
    ) -> TaskRecord:
        record = TaskRecord(user_id=user_id, task_type=task_type, payload=payload)
        db.add(record)
        db.commit()
        db.refresh(record)
        return record

    @staticmethod
    def enqueue(db: Session, record: TaskRecord) -> TaskRecord:
        """Send the record's job to the broker. A broker failure marks it failed."""
        from .. import tasks

        payload = record.payload or {}
        try:
            if record.task_type == TaskType.BEST_ANSWERS:
                tasks.generate_best_answers_task.delay(
                    record.id, payload.get("questionIds", [])
                )
            else:
                tasks.analyze_resume_task.delay(record.id, payload.get("resumeId"))
            logger.info(f"Queued {record.task_type.value} task {record.id}")
        except Exception as e:
            logger.error(f"Failed to queue task {record.id}: {str(e)}")
            TaskService.mark_failed(db, record.id, f"Failed to queue task: {str(e)}")
        return record

    @staticmethod
    def submit(
        db: Session,
        task_type: TaskType,
        payload: Dict[str, Any],
        user_id: Optional[int] = None,
    ) -> TaskRecord:
        return TaskService.enqueue(
            db, TaskService.create_task(db, task_type, payload, user_id)
        )

    @staticmethod
    def _set_status(
        db: Session,
        task_id: str,
        status: TaskStatus,
        result: Any = None,
        error: Optional[str] = None,
    ) -> Optional[TaskRecord]:
        record = db.query(TaskRecord).filter(TaskRecord.id == task_id).first()
        if record is None:
            logger.warning(f"Task record {task_id} not found")
            return None
        record.status = status
        if result is not None:
            record.result = result
        if error is not None:
            record.error = error
        db.commit()
        return record

    @staticmethod
    def mark_running(db: Session, task_id: str) -> Optional[TaskRecord]:
        return TaskService._set_status(db, task_id, TaskStatus.RUNNING)

    @staticmethod
    def mark_succeeded(db: Session, task_id: str, result: Any) -> Optional[TaskRecord]:
        return TaskService._set_status(db, task_id, TaskStatus.SUCCEEDED, result=result)

    @staticmethod
    def mark_failed(db: Session, task_id: str, error: str) -> Optional[TaskRecord]:
        return TaskService._set_status(db, task_id, TaskStatus.FAILED, error=error)

    @staticmethod
    def get_task(db: Session, task_id: str, user_id: int) -> TaskRecord:
        record = (
            db.query(TaskRecord)
            .filter(TaskRecord.id == task_id, TaskRecord.user_id == user_id)
            .first()
        )
        if record is None:
            raise NotFoundError("任务未找到")
        return record
