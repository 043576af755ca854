import pytest


@pytest.fixture
def answered_interview(client, auth_headers, resume_with_profile):
    interview = client.post(
        "/api/interview/generate",
        json={"jobData": {"company": "字节跳动", "position": "前端工程师"}},
        headers=auth_headers,
    ).json()
    client.post(
        "/api/interview/evaluate",
        json={"questionId": interview["questions"][0]["id"], "answer": "虚拟DOM是..."},
        headers=auth_headers,
    )
    return interview


def test_dashboard_questions(client, auth_headers, answered_interview):
    response = client.get("/api/dashboard/questions", headers=auth_headers)

    body = response.json()
    assert body["success"] is True
    assert len(body["questions"]) == 6
    assert body["questions"][0]["interview"]["targetCompany"] == "字节跳动"

    stats = body["stats"]
    assert stats["totalQuestions"] == 6
    assert stats["answeredQuestions"] == 1
    assert stats["avgScore"] == 85
    assert stats["bySource"] == {"generated": 3, "bank": 3}
    assert sum(stats["byDifficulty"].values()) == 6


def test_dashboard_is_empty_for_new_user(client, auth_headers):
    stats = client.get("/api/dashboard/questions", headers=auth_headers).json()["stats"]

    assert stats["totalQuestions"] == 0
    assert stats["avgScore"] == 0


def test_download_all_reports(client, auth_headers, answered_interview):
    response = client.post("/api/dashboard/download-all-reports", headers=auth_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "filename*=UTF-8''" in response.headers["content-disposition"]
    assert response.headers["cache-control"] == "no-cache"
    assert "如何设计一个短链接服务" in response.text
    assert "虚拟DOM是..." in response.text
