from codemocklab.models.interview import Interview, InterviewReport, InterviewRound, Question
from codemocklab.schemas.interview import (
    Difficulty,
    InterviewStatus,
    InterviewType,
    QuestionSource,
    QuestionType,
    RoundType,
)
from codemocklab.services.report_service import ReportService


def make_interview(db, user, scored):
    interview = Interview(
        user_id=user.id,
        target_company="字节跳动",
        type=InterviewType.TECHNICAL,
        status=InterviewStatus.IN_PROGRESS,
    )
    round_ = InterviewRound(round_number=1, type=RoundType.CODING)
    interview.rounds.append(round_)
    for index, (question_type, score) in enumerate(scored):
        round_.questions.append(
            Question(
                content=f"问题{index}",
                type=question_type,
                difficulty=Difficulty.MEDIUM,
                source=QuestionSource.GENERATED,
                score=score,
                order_index=index,
            )
        )
    db.add(interview)
    db.commit()
    db.refresh(interview)
    return interview


def test_aggregate_category_scores(db, user):
    interview = make_interview(
        db,
        user,
        [
            (QuestionType.TECHNICAL_KNOWLEDGE, 90),
            (QuestionType.ALGORITHM, 70),
            (QuestionType.BEHAVIORAL, 80),
            (QuestionType.SCENARIO, 60),
            (QuestionType.SYSTEM_DESIGN, None),
        ],
    )

    fields = ReportService.build_aggregate(interview)

    assert fields["overall_score"] == 75
    assert fields["technical_score"] == 80
    assert fields["communication_score"] == 80
    assert fields["problem_solving_score"] == 65
    assert fields["system_design_score"] is None
    assert fields["strengths"] == ["基础知识扎实"]
    assert fields["weaknesses"] == []
    assert fields["detailed_analysis"]["answeredQuestions"] == 4
    assert fields["detailed_analysis"]["scoreDistribution"] == {
        "excellent": 1,
        "good": 2,
        "basic": 1,
    }


def test_aggregate_flags_weak_interviews(db, user):
    interview = make_interview(db, user, [(QuestionType.CODING, 50)])

    fields = ReportService.build_aggregate(interview)

    assert fields["strengths"] == []
    assert fields["weaknesses"] == ["需要加强技术深度"]
    assert fields["recommendations"] == ["建议多做算法练习和系统设计题"]


def test_aggregate_without_answers(db, user):
    interview = make_interview(db, user, [(QuestionType.CODING, None)])

    fields = ReportService.build_aggregate(interview)

    assert fields["overall_score"] == 0
    assert fields["strengths"] == []
    assert fields["weaknesses"] == []


def test_save_report_respects_overwrite(db, user):
    interview = make_interview(db, user, [(QuestionType.CODING, 90)])
    first = ReportService.save_report(db, interview, ReportService.build_aggregate(interview))

    kept = ReportService.save_report(
        db, interview, {"overall_score": 10}, overwrite=False
    )
    assert kept.id == first.id
    assert kept.overall_score == 90

    replaced = ReportService.save_report(db, interview, {"overall_score": 10})
    assert replaced.overall_score == 10
    assert db.query(InterviewReport).count() == 1
