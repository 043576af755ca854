from datetime import datetime, timezone
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from ..core.constants import JOB_PREFERENCE_LIST_LIMIT
from ..core.logger import get_logger
from ..models.job_preference import UserJobPreference
from ..schemas.job_preference import JobPreferenceCreate
from ..utils.exceptions import InvalidInputError, NotFoundError

logger = get_logger(__name__)

PREFERENCE_QUERY_TYPES = ("latest", "default", "all")


class JobPreferenceService:
    @staticmethod
    def get_preferences(
        db: Session, user_id: int, query_type: str = "latest"
    ) -> Union[Optional[UserJobPreference], List[UserJobPreference]]:
        if query_type not in PREFERENCE_QUERY_TYPES:
            raise InvalidInputError(
                f"type must be one of: {', '.join(PREFERENCE_QUERY_TYPES)}"
            )

        query = db.query(UserJobPreference).filter(UserJobPreference.user_id == user_id)
        if query_type == "default":
            return query.filter(UserJobPreference.is_default.is_(True)).first()
        if query_type == "latest":
            return query.order_by(
                UserJobPreference.last_used_at.desc(), UserJobPreference.id.desc()
            ).first()
        return (
            query.order_by(
                UserJobPreference.is_default.desc(),
                UserJobPreference.last_used_at.desc(),
                UserJobPreference.id.desc(),
            )
            .limit(JOB_PREFERENCE_LIST_LIMIT)
            .all()
        )

    @staticmethod
    def _clear_default(db: Session, user_id: int, keep_id: Optional[int] = None):
        query = db.query(UserJobPreference).filter(
            UserJobPreference.user_id == user_id, UserJobPreference.is_default.is_(True)
        )
        if keep_id is not None:
            query = query.filter(UserJobPreference.id != keep_id)
        query.update({UserJobPreference.is_default: False}, synchronize_session="fetch")

    @staticmethod
    def save_preference(
        db: Session, user_id: int, data: JobPreferenceCreate
    ) -> UserJobPreference:
        """
        Record a job configuration for the user.

        The same (company, position, level) reuses its row and bumps the
        usage count. A preference saved as default clears the flag on every
        other preference of the user in the same transaction.
        """
        now = datetime.now(timezone.utc)
        try:
            preference = (
                db.query(UserJobPreference)
                .filter(
                    UserJobPreference.user_id == user_id,
                    UserJobPreference.company == data.company,
                    UserJobPreference.position == data.position,
                    UserJobPreference.level == data.level,
                )
                .first()
            )

            if data.is_default:
                JobPreferenceService._clear_default(
                    db, user_id, keep_id=preference.id if preference else None
                )

            if preference:
                preference.custom_company = data.custom_company
                preference.requirements = data.requirements
                preference.job_responsibilities = data.job_responsibilities
                preference.job_requirements = data.job_requirements
                preference.usage_count = (preference.usage_count or 0) + 1
                preference.last_used_at = now
                if data.is_default:
                    preference.is_default = True
            else:
                preference = UserJobPreference(
                    user_id=user_id,
                    company=data.company,
                    custom_company=data.custom_company,
                    position=data.position,
                    level=data.level,
                    requirements=data.requirements,
                    job_responsibilities=data.job_responsibilities,
                    job_requirements=data.job_requirements,
                    is_default=data.is_default,
                    usage_count=1,
                    last_used_at=now,
                )
                db.add(preference)

            db.commit()
            db.refresh(preference)
            return preference
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def delete_preference(db: Session, user_id: int, preference_id: int) -> None:
        preference = (
            db.query(UserJobPreference)
            .filter(
                UserJobPreference.id == preference_id,
                UserJobPreference.user_id == user_id,
            )
            .first()
        )
        if preference is None:
            raise NotFoundError("偏好设置不存在")
        db.delete(preference)
        db.commit()
        logger.info(f"Deleted job preference {preference_id} of user {user_id}")
