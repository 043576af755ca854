import pytest

from codemocklab import tasks
from codemocklab.models.ai_profile import AIProfile
from codemocklab.models.interview import Question
from codemocklab.models.task_record import TaskRecord
from codemocklab.schemas.task import TaskStatus, TaskType
from codemocklab.services.interview_service import InterviewService
from codemocklab.services.task_service import TaskService

# captured before the autouse fixture swaps in recorders
generate_best_answers_task = tasks.generate_best_answers_task
analyze_resume_task = tasks.analyze_resume_task


@pytest.fixture(autouse=True)
def scripted_ai(monkeypatch, ai):
    monkeypatch.setattr(tasks, "_interview_ai", lambda: ai)
    return ai


def _record(db, task_id):
    db.expire_all()
    return db.query(TaskRecord).filter(TaskRecord.id == task_id).one()


def test_interview_generation_queues_backfill(db, user, ai, settings, resume_with_profile, queued_tasks):
    result = InterviewService.generate(db, user, ai, settings)

    record = _record(db, result["taskId"])
    assert record.task_type == TaskType.BEST_ANSWERS
    assert record.status == TaskStatus.PENDING
    assert record.payload["interviewId"] == result["interviewId"]
    assert queued_tasks == [
        ("best_answers", (record.id, [q["id"] for q in result["questions"]]))
    ]


def test_broker_failure_marks_task_failed(db, user, monkeypatch):
    class _Broken:
        def delay(self, *args):
            raise ConnectionError("broker down")

    monkeypatch.setattr(tasks, "generate_best_answers_task", _Broken())

    record = TaskService.submit(db, TaskType.BEST_ANSWERS, {"questionIds": [1]}, user.id)

    record = _record(db, record.id)
    assert record.status == TaskStatus.FAILED
    assert "broker down" in record.error


def test_best_answer_task_runs_backfill(db, user, ai, settings, resume_with_profile, fake_llm):
    result = InterviewService.generate(db, user, ai, settings)
    ids = [q["id"] for q in result["questions"]]

    outcome = generate_best_answers_task(result["taskId"], ids)

    assert outcome == {"total": 6, "succeeded": 6, "failed": 0}
    record = _record(db, result["taskId"])
    assert record.status == TaskStatus.SUCCEEDED
    assert record.result == outcome
    assert db.query(Question).filter(Question.model_answer.is_(None)).count() == 0


def test_resume_analysis_task(db, user, resume):
    record = TaskService.create_task(
        db, TaskType.RESUME_ANALYSIS, {"resumeId": resume.id}, user.id
    )

    outcome = analyze_resume_task(record.id, resume.id)

    assert outcome["resumeId"] == resume.id
    assert outcome["source"] == "ai"
    assert "phone" in outcome["removedFields"]
    assert _record(db, record.id).status == TaskStatus.SUCCEEDED
    assert db.query(AIProfile).filter(AIProfile.resume_id == resume.id).count() == 1


def test_resume_analysis_task_missing_resume(db, user):
    record = TaskService.create_task(
        db, TaskType.RESUME_ANALYSIS, {"resumeId": 424242}, user.id
    )

    assert analyze_resume_task(record.id, 424242) is None

    record = _record(db, record.id)
    assert record.status == TaskStatus.FAILED
    assert "424242" in record.error
