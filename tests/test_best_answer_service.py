import pytest

from codemocklab.core.constants import BEST_ANSWER_FAILED_PLACEHOLDER
from codemocklab.models.interview import Question
from codemocklab.services.best_answer_service import BestAnswerService, has_usable_answer
from codemocklab.services.interview_service import InterviewService


@pytest.fixture
def questions(db, user, ai, settings, resume_with_profile):
    InterviewService.generate(db, user, ai, settings)
    return db.query(Question).order_by(Question.id).all()


def test_has_usable_answer():
    assert has_usable_answer("答案") is True
    assert has_usable_answer("   ") is False
    assert has_usable_answer(None) is False
    assert has_usable_answer(BEST_ANSWER_FAILED_PLACEHOLDER) is False


def test_backfill_fills_every_pending_question(db, ai, settings, fake_llm, questions):
    ids = [q.id for q in questions]

    result = BestAnswerService.backfill(db, ai, ids, settings)

    assert result == {"total": 6, "succeeded": 6, "failed": 0}
    db.expire_all()
    assert {q.model_answer for q in db.query(Question).all()} == {fake_llm.best_answer}


def test_backfill_stores_placeholder_on_failure(db, ai, settings, fake_llm, questions):
    fake_llm.failures.add("best_answer")
    ids = [q.id for q in questions]

    result = BestAnswerService.backfill(db, ai, ids, settings)

    assert result == {"total": 6, "succeeded": 0, "failed": 6}
    db.expire_all()
    assert {q.model_answer for q in db.query(Question).all()} == {
        BEST_ANSWER_FAILED_PLACEHOLDER
    }
    # placeholders are not retried by a second pass
    assert BestAnswerService.backfill(db, ai, ids, settings)["total"] == 0


def test_backfill_skips_answered_questions(db, ai, settings, questions):
    questions[0].model_answer = "人工整理的答案"
    db.commit()

    result = BestAnswerService.backfill(db, ai, [q.id for q in questions], settings)

    assert result["total"] == 5
    db.refresh(questions[0])
    assert questions[0].model_answer == "人工整理的答案"


def test_pending_question_ids(db, questions):
    questions[1].model_answer = "已有答案"
    db.commit()
    ids = [q.id for q in questions]

    assert BestAnswerService.pending_question_ids(db, ids) == [ids[0]] + ids[2:]
    assert BestAnswerService.pending_question_ids(db, []) == []


def test_contribute_replaces_placeholder(db, ai, settings, fake_llm, questions):
    question = questions[0]
    question.model_answer = BEST_ANSWER_FAILED_PLACEHOLDER
    db.commit()

    outcome = BestAnswerService.contribute_answer(db, ai, question, "新答案", settings)

    assert outcome["updated"] is True
    assert outcome["reason"] == "首次生成"
    assert question.model_answer == "新答案"
    assert "comparison" not in fake_llm.prompts


def test_contribute_needs_confident_verdict(db, ai, settings, fake_llm, questions):
    question = questions[0]
    question.model_answer = "旧答案"
    db.commit()
    fake_llm.comparison = {"betterAnswer": "B", "reason": "略好", "confidenceScore": 70}

    outcome = BestAnswerService.contribute_answer(db, ai, question, "新答案", settings)

    assert outcome["updated"] is False
    assert outcome["confidenceScore"] == 70
    assert question.model_answer == "旧答案"


def test_contribute_replaces_on_confident_verdict(db, ai, settings, questions):
    question = questions[0]
    question.model_answer = "旧答案"
    db.commit()

    outcome = BestAnswerService.contribute_answer(db, ai, question, "新答案", settings)

    assert outcome["updated"] is True
    assert outcome["reason"] == "新答案更完整"
    assert outcome["improvements"] == ["补充示例"]
    assert question.model_answer == "新答案"


def test_contribute_keeps_answer_when_existing_is_better(db, ai, settings, fake_llm, questions):
    question = questions[0]
    question.model_answer = "旧答案"
    db.commit()
    fake_llm.comparison = {"betterAnswer": "A", "reason": "旧答案更好", "confidenceScore": 95}

    outcome = BestAnswerService.contribute_answer(db, ai, question, "新答案", settings)

    assert outcome["updated"] is False
    assert question.model_answer == "旧答案"


def test_contribute_comparison_failure(db, ai, settings, fake_llm, questions):
    question = questions[0]
    question.model_answer = "旧答案"
    db.commit()
    fake_llm.failures.add("comparison")

    outcome = BestAnswerService.contribute_answer(db, ai, question, "新答案", settings)

    assert outcome == {"updated": False, "reason": "对比失败", "confidenceScore": None}
