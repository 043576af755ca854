from codemocklab.services.response_parser import (
    is_valid_analysis,
    parse_llm_json,
    strip_code_fences,
)


def test_plain_json_object():
    assert parse_llm_json('{"score": 80, "feedback": "ok"}') == {
        "score": 80,
        "feedback": "ok",
    }


def test_markdown_fences_are_removed():
    raw = '```json\n{"score": 72}\n```'
    assert strip_code_fences(raw) == '{"score": 72}'
    assert parse_llm_json(raw) == {"score": 72}


def test_object_embedded_in_prose():
    raw = '好的，以下是结果：{"betterAnswer": "A", "confidenceScore": 60} 希望有帮助'
    assert parse_llm_json(raw) == {"betterAnswer": "A", "confidenceScore": 60}


def test_truncated_reply_is_closed():
    raw = '{"techStack": [{"technology": "React"}], "summary": "未完成的'
    parsed = parse_llm_json(raw)

    assert parsed == {"techStack": [{"technology": "React"}]}


def test_truncated_nested_array_is_closed():
    raw = '{"techStack": [{"technology": "React"}, {"technology": "Vue"'
    parsed = parse_llm_json(raw)

    assert parsed == {"techStack": [{"technology": "React"}]}


def test_unrecoverable_replies_return_none():
    assert parse_llm_json("") is None
    assert parse_llm_json("抱歉，我无法完成这个请求") is None
    assert parse_llm_json("[1, 2, 3]") is None


def test_tech_stack_sorted_by_dominance():
    raw = (
        '{"techStack": ['
        '{"technology": "Vue", "dominanceScore": 40},'
        '{"technology": "React", "dominanceScore": 95},'
        '{"technology": "Go", "dominanceScore": 70}]}'
    )
    parsed = parse_llm_json(raw)

    assert [t["technology"] for t in parsed["techStack"]] == ["React", "Go", "Vue"]


def test_role_matching_list_becomes_mapping():
    raw = (
        '{"roleMatchingAnalysis": ['
        '{"role": "前端开发", "matchScore": 90},'
        '{"role": "全栈开发", "matchScore": 70}]}'
    )
    parsed = parse_llm_json(raw)

    assert parsed["roleMatchingAnalysis"] == {"前端开发": 90, "全栈开发": 70}


def test_is_valid_analysis_requires_tech_stack_list():
    assert is_valid_analysis({"techStack": []})
    assert not is_valid_analysis({"techStack": "React"})
    assert not is_valid_analysis({"skills": []})
    assert not is_valid_analysis(None)


def test_reply_cut_inside_an_array():
    parsed = parse_llm_json('{"a":1,"b":[1,2,')

    assert parsed["a"] == 1
    assert parsed["b"] == [1, 2]
