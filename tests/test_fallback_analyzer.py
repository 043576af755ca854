from codemocklab.services import fallback_analyzer


def test_detects_known_technologies_case_insensitively():
    techs = fallback_analyzer.extract_tech_keywords("熟悉 react、docker 与 mysql")
    assert techs == ["React", "MySQL", "Docker"]


def test_categories():
    assert fallback_analyzer.categorize_tech("React") == "框架"
    assert fallback_analyzer.categorize_tech("Python") == "语言"
    assert fallback_analyzer.categorize_tech("Redis") == "数据库"
    assert fallback_analyzer.categorize_tech("Node.js") == "平台"
    assert fallback_analyzer.categorize_tech("Elixir") == "其他"


def test_experience_level_keywords():
    assert fallback_analyzer.determine_experience_level("高级前端工程师") == "senior"
    assert fallback_analyzer.determine_experience_level("5年开发经验") == "mid"
    assert fallback_analyzer.determine_experience_level("应届毕业生") == "junior"
    assert fallback_analyzer.determine_experience_level("热爱编程") == "mid"


def test_specializations_default_to_full_stack():
    assert fallback_analyzer.determine_specializations(["React", "Docker"]) == [
        "前端开发",
        "DevOps",
    ]
    assert fallback_analyzer.determine_specializations([]) == ["全栈开发"]


def test_analysis_shape():
    analysis = fallback_analyzer.analyze("我有5年React经验")

    assert analysis["techStack"] == [
        {
            "technology": "React",
            "category": "框架",
            "proficiency": "中级",
            "valueScore": 100,
            "evidenceCount": 1,
            "lastUsed": "近期",
        }
    ]
    assert analysis["experienceLevel"]["level"] == "mid"
    assert analysis["experienceLevel"]["confidence"] == 0.7
    assert analysis["specializations"] == ["前端开发"]
    assert analysis["simulatedInterview"] is None


def test_value_score_floor():
    content = " ".join(fallback_analyzer.KNOWN_TECHNOLOGIES)
    scores = [t["valueScore"] for t in fallback_analyzer.analyze(content)["techStack"]]

    assert scores[0] == 100
    assert min(scores) == 60


def test_empty_content_still_produces_an_analysis():
    analysis = fallback_analyzer.analyze("")

    assert analysis["techStack"] == []
    assert analysis["simulatedInterview"] is None
