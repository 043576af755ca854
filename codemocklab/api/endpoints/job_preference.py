from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...core.auth import get_current_user
from ...db.session import get_db
from ...models.user import User
from ...schemas.job_preference import JobPreferenceCreate, JobPreferenceResponse
from ...services.job_preference_service import JobPreferenceService
from ...utils.exceptions import MissingFieldError

router = APIRouter()


def _dump(preference) -> dict:
    return JobPreferenceResponse.model_validate(preference).model_dump(
        mode="json", by_alias=True
    )


@router.get("")
def get_job_preferences(
    query_type: str = Query("latest", alias="type"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    result = JobPreferenceService.get_preferences(db, current_user.id, query_type)
    if isinstance(result, list):
        data = [_dump(preference) for preference in result]
    else:
        data = _dump(result) if result else None
    return {"success": True, "data": data}


@router.post("")
def save_job_preference(
    preference: JobPreferenceCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    saved = JobPreferenceService.save_preference(db, current_user.id, preference)
    return {"success": True, "data": _dump(saved)}


@router.delete("")
def delete_job_preference(
    preference_id: Optional[int] = Query(None, alias="id"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if preference_id is None:
        raise MissingFieldError("id")
    JobPreferenceService.delete_preference(db, current_user.id, preference_id)
    return {"success": True, "message": "删除成功"}
