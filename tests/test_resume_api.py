import io

import pytest
from docx import Document

from codemocklab.models.ai_profile import AIProfile
from codemocklab.models.resume import Resume
from codemocklab.dependencies.llm import get_llm_client
from codemocklab.services import llm_client
from codemocklab.services.document_parser import DOCX_MIME, PDF_MIME
from codemocklab.services.llm_client import DeepSeekClient

from conftest import RESUME_TEXT, auth_headers_for, make_user
from main import app


def docx_upload(text, name="resume.docx"):
    document = Document()
    for line in text.split("\n"):
        document.add_paragraph(line)
    buffer = io.BytesIO()
    document.save(buffer)
    return {"file": (name, buffer.getvalue(), DOCX_MIME)}


def test_upload_requires_authentication(client):
    response = client.post("/api/resume/upload", files=docx_upload(RESUME_TEXT))

    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHORIZED"


def test_upload_with_fallback_analysis(client, auth_headers, fake_llm, db):
    fake_llm.failures.add("analysis")

    response = client.post(
        "/api/resume/upload",
        files=docx_upload("我有5年React开发经验\n熟悉团队协作"),
        headers=auth_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    data = body["data"]
    assert data["fileName"] == "resume.docx"
    assert data["basicAnalysis"]["techKeywords"] == ["React"]

    ai_analysis = data["aiAnalysis"]
    assert ai_analysis["hasAIAnalysis"] is True
    assert ai_analysis["source"] == "fallback"
    profile = ai_analysis["profile"]
    assert profile["experienceLevel"] == "mid"
    assert profile["techStack"][0]["technology"] == "React"
    assert profile["techStack"][0]["category"] == "框架"
    assert profile["simulatedInterview"] is None
    assert profile["stats"]["hasQuestionBank"] is False


def test_upload_strips_personal_data(client, auth_headers, db):
    response = client.post(
        "/api/resume/upload", files=docx_upload(RESUME_TEXT), headers=auth_headers
    )
    assert response.status_code == 200

    data = response.json()["data"]
    assert data["aiAnalysis"]["source"] == "ai"
    assert data["aiAnalysis"]["profile"]["stats"]["questionBankSize"] == 3

    check = client.get("/api/resume/check", headers=auth_headers).json()
    assert check["hasResume"] is True
    assert check["resume"]["hasAIProfile"] is True

    stored = db.query(Resume).filter(Resume.id == data["resumeId"]).one()
    assert "13812345678" not in stored.raw_text
    assert "zhangsan@example.com" not in stored.raw_text
    assert stored.parsed_content["removedFields"] == ["phone", "email"]


def test_upload_rejects_unsupported_type(client, auth_headers):
    response = client.post(
        "/api/resume/upload",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "UNSUPPORTED_FILE_TYPE"


def test_upload_rejects_oversized_file(client, auth_headers, settings):
    payload = b"0" * (settings.UPLOAD_MAX_SIZE + 1)
    response = client.post(
        "/api/resume/upload",
        files={"file": ("big.pdf", payload, PDF_MIME)},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "FILE_SIZE_EXCEEDED"


def test_upload_rejects_unreadable_document(client, auth_headers):
    response = client.post(
        "/api/resume/upload",
        files={"file": ("broken.docx", b"not a docx", DOCX_MIME)},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "DOCUMENT_PARSE_ERROR"


def test_check_without_resume(client, auth_headers):
    response = client.get("/api/resume/check", headers=auth_headers)

    assert response.json() == {"hasResume": False, "resume": None}


def test_ai_profile_lookup(client, auth_headers, resume_with_profile):
    response = client.get(
        f"/api/resume/ai-profile/{resume_with_profile.id}", headers=auth_headers
    )

    data = response.json()["data"]
    assert data["hasAIProfile"] is True
    assert [t["technology"] for t in data["techStack"]] == ["React", "TypeScript"]
    assert data["experienceLevel"] == "senior"


def test_ai_profile_missing(client, auth_headers, resume):
    response = client.get(f"/api/resume/ai-profile/{resume.id}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["data"]["hasAIProfile"] is False


def test_ai_profile_of_another_user(client, db, resume_with_profile):
    stranger = make_user(db, email="stranger@example.com")

    response = client.get(
        f"/api/resume/ai-profile/{resume_with_profile.id}",
        headers=auth_headers_for(stranger),
    )

    assert response.status_code == 404
    assert response.json()["code"] == "RESUME_NOT_FOUND"


def test_reanalysis_replaces_tech_stack(client, auth_headers, resume_with_profile, fake_llm, db):
    fake_llm.analysis = {
        "techStack": [{"technology": "Go", "category": "语言", "valueScore": 88}],
        "experienceLevel": "lead",
    }

    response = client.post(
        "/api/resume/analyze",
        json={"resumeId": resume_with_profile.id, "content": RESUME_TEXT},
        headers=auth_headers,
    )

    assert response.status_code == 200
    profile = response.json()["data"]["aiProfile"]
    assert [t["technology"] for t in profile["techStack"]] == ["Go"]
    assert profile["experienceLevel"] == "lead"
    assert profile["simulatedInterview"] is None
    assert db.query(AIProfile).count() == 1


def test_analyze_rejects_short_content(client, auth_headers, resume):
    response = client.post(
        "/api/resume/analyze",
        json={"resumeId": resume.id, "content": "太短了"},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_INPUT"


class MalformedReply:
    status_code = 200
    ok = True

    def __init__(self, payload):
        self.payload = payload
        self.text = str(payload)

    def json(self):
        return self.payload


@pytest.mark.parametrize(
    "payload",
    [
        {"choices": []},
        {"choices": [{"message": {"content": None}}]},
    ],
)
def test_upload_falls_back_on_malformed_provider_reply(
    client, auth_headers, settings, monkeypatch, payload
):
    monkeypatch.setattr(
        llm_client.requests, "post", lambda *args, **kwargs: MalformedReply(payload)
    )
    app.dependency_overrides[get_llm_client] = lambda: DeepSeekClient(settings)

    response = client.post(
        "/api/resume/upload",
        files=docx_upload("我有5年React开发经验\n熟悉团队协作"),
        headers=auth_headers,
    )

    assert response.status_code == 200
    ai_analysis = response.json()["data"]["aiAnalysis"]
    assert ai_analysis["hasAIAnalysis"] is True
    assert ai_analysis["source"] == "fallback"
    assert ai_analysis["profile"]["techStack"][0]["technology"] == "React"
