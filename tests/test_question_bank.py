from codemocklab.services.ai_profile_service import AIProfileService, question_bank_size
from codemocklab.services.interview_service import bank_questions


def test_bank_lists_are_flattened_in_category_order():
    specs = bank_questions(
        {
            "projectExperience": ["介绍一个你主导的项目"],
            "systemDesign": ["设计一个短链服务", "  "],
            "techDepth": {"React": ["Fiber 架构解决了什么问题？"]},
        }
    )

    assert [spec["content"] for spec in specs] == [
        "设计一个短链服务",
        "介绍一个你主导的项目",
        "Fiber 架构解决了什么问题？",
    ]
    assert specs[-1]["topics"][0] == "React"


def test_lone_string_category_is_one_question():
    specs = bank_questions({"systemDesign": "设计一个秒杀系统"})

    assert len(specs) == 1
    assert specs[0]["content"] == "设计一个秒杀系统"
    assert specs[0]["bank_category"] == "systemDesign"


def test_lone_string_tech_depth_is_one_question():
    specs = bank_questions({"techDepth": {"Redis": "如何保证缓存一致性？"}})

    assert [spec["content"] for spec in specs] == ["如何保证缓存一致性？"]


def test_unusable_category_values_are_skipped():
    specs = bank_questions({"systemDesign": 3, "leadership": {"a": "b"}, "techDepth": ["x"]})

    assert specs == []


def test_stored_bank_wraps_lone_strings(db, resume):
    analysis = {
        "techStack": [{"technology": "Go", "category": "语言"}],
        "simulatedInterview": {
            "systemDesign": "设计一个秒杀系统",
            "techDepth": {"Go": "goroutine 泄漏如何排查？"},
        },
    }

    profile = AIProfileService.upsert_profile(db, resume, analysis, "ai")

    assert profile.simulated_interview == {
        "systemDesign": ["设计一个秒杀系统"],
        "techDepth": {"Go": ["goroutine 泄漏如何排查？"]},
    }
    assert question_bank_size(profile.simulated_interview) == 2
