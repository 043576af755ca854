from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...core.auth import get_current_user
from ...db.session import get_db
from ...models.user import User
from ...schemas.task import TaskRecordResponse
from ...services.task_service import TaskService

router = APIRouter()


@router.get("/{task_id}")
def get_task_status(
    task_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    record = TaskService.get_task(db, task_id, current_user.id)
    return {
        "success": True,
        "task": TaskRecordResponse.model_validate(record).model_dump(
            mode="json", by_alias=True
        ),
    }
