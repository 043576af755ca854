import json
import os
import tempfile

# settings are read once at import time, so the environment goes first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["NEXTAUTH_URL"] = "http://localhost:3000"
os.environ["NEXTAUTH_SECRET"] = "test-secret-key"
os.environ["DEEPSEEK_API_KEY"] = "test-deepseek-key"
os.environ["BEST_ANSWER_BATCH_DELAY_SECONDS"] = "0"
os.environ["RATE_LIMIT_PER_MINUTE"] = "1000"
os.environ["CODEMOCKLAB_LOG_DIR"] = tempfile.mkdtemp(prefix="codemocklab-logs-")

import pytest
from fastapi.testclient import TestClient

from codemocklab import tasks
from codemocklab.core.config import get_settings
from codemocklab.db.base import Base
from codemocklab.db.session import SessionLocal, engine, init_db
from codemocklab.dependencies.llm import get_llm_client
from codemocklab.models.resume import Resume
from codemocklab.models.user import User
from codemocklab.services.ai_interviewer import InterviewAI
from codemocklab.services.ai_profile_service import AIProfileService
from codemocklab.services.auth_service import AuthService
from codemocklab.utils.exceptions import LLMError
from main import app


SAMPLE_ANALYSIS = {
    "techStack": [
        {
            "technology": "React",
            "category": "框架",
            "proficiency": "高级",
            "valueScore": 92,
            "evidenceCount": 4,
            "lastUsed": "2024",
        },
        {
            "technology": "TypeScript",
            "category": "语言",
            "proficiency": "中级",
            "valueScore": 85,
            "evidenceCount": 2,
            "lastUsed": "2024",
        },
    ],
    "techHighlights": ["大型前端项目架构经验"],
    "projectAnalysis": [
        {
            "projectName": "电商平台",
            "description": "负责前端架构",
            "techStack": ["React", "TypeScript"],
            "complexity": "复杂",
            "impact": "支撑百万用户",
            "role": "前端负责人",
            "highlights": ["性能优化"],
            "interviewQuestions": ["如何做首屏优化？"],
        }
    ],
    "skillAssessment": {"technical": 85, "communication": 78},
    "experienceLevel": {"level": "senior", "confidence": 0.85, "reasoning": "多年经验"},
    "specializations": ["前端开发"],
    "careerSuggestions": ["深入全栈"],
    "roleMatchingAnalysis": {"前端开发": 90},
    "simulatedInterview": {
        "systemDesign": ["设计一个高并发的秒杀系统"],
        "projectExperience": ["介绍一个你主导的项目"],
        "techDepth": {"React": ["React Fiber 的调度机制是什么？"]},
    },
}

GENERATED_QUESTIONS = [
    {
        "id": "q1",
        "content": "请解释React的虚拟DOM",
        "type": "technical",
        "difficulty": "medium",
        "topics": ["React"],
        "followUps": ["diff算法的复杂度是多少？"],
    },
    {
        "id": "q2",
        "content": "如何设计一个短链接服务",
        "type": "system-design",
        "difficulty": "hard",
        "topics": ["系统设计"],
    },
    {
        "id": "q3",
        "content": "描述一次你解决线上故障的经历",
        "type": "behavioral",
        "difficulty": "easy",
        "topics": [],
    },
]

RESUME_TEXT = (
    "张三 电话：13812345678 邮箱：zhangsan@example.com\n"
    "工作经历\n"
    "2019年-2024年 字节 前端工程师\n"
    "负责React和TypeScript项目开发，拥有5年前端经验\n"
    "项目经历\n"
    "电商平台项目 React Redux\n"
    "负责首屏性能优化\n"
    "教育背景\n"
    "某某大学 计算机 本科\n"
)


class FakeLLM:
    """Scripted stand-in for the DeepSeek client, keyed on the prompt kind."""

    def __init__(self):
        self.prompts = []
        self.failures = set()
        self.analysis = SAMPLE_ANALYSIS
        self.questions = GENERATED_QUESTIONS
        self.score = 85
        self.follow_up = "那么在大列表场景下如何优化？"
        self.best_answer = "标准答案：虚拟DOM是对真实DOM的轻量描述。"
        self.report = {
            "overallScore": 82,
            "technicalScore": 85,
            "communicationScore": 78,
            "problemSolvingScore": 80,
            "strengths": ["基础扎实"],
            "weaknesses": ["系统设计经验不足"],
            "recommendations": ["多练习系统设计"],
            "hiringRecommendation": "推荐",
        }
        self.comparison = {
            "betterAnswer": "B",
            "reason": "新答案更完整",
            "improvements": ["补充示例"],
            "confidenceScore": 90,
        }

    @staticmethod
    def kind_of(prompt: str) -> str:
        if "请对比以下两个面试问题的答案" in prompt:
            return "comparison"
        if "生成综合评估报告" in prompt:
            return "report"
        if "请评估以下面试回答" in prompt:
            return "evaluation"
        if "生成一个深入的追问" in prompt:
            return "follow_up"
        if "标准答案示例" in prompt:
            return "best_answer"
        if "道高质量的技术面试题" in prompt:
            return "questions"
        if "技术画像分析" in prompt:
            return "analysis"
        return "unknown"

    def complete(self, prompt, temperature=0.7, max_tokens=2000, timeout=None):
        kind = self.kind_of(prompt)
        self.prompts.append(kind)
        if kind in self.failures:
            raise LLMError(f"scripted {kind} failure")

        if kind == "analysis":
            return "```json\n" + json.dumps(self.analysis, ensure_ascii=False) + "\n```"
        if kind == "questions":
            return json.dumps({"questions": self.questions}, ensure_ascii=False)
        if kind == "evaluation":
            return json.dumps(
                {
                    "score": self.score,
                    "feedback": "回答较为完整",
                    "strengths": ["思路清晰"],
                    "improvements": ["补充细节"],
                    "suggestions": ["阅读源码"],
                },
                ensure_ascii=False,
            )
        if kind == "follow_up":
            return self.follow_up
        if kind == "best_answer":
            return self.best_answer
        if kind == "report":
            return json.dumps(self.report, ensure_ascii=False)
        if kind == "comparison":
            return json.dumps(self.comparison, ensure_ascii=False)
        return ""


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def db():
    init_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def ai(fake_llm, settings):
    return InterviewAI(fake_llm, settings)


@pytest.fixture(autouse=True)
def queued_tasks(monkeypatch):
    """Record Celery submissions instead of talking to a broker."""
    calls = []

    class _Recorder:
        def __init__(self, name):
            self.name = name

        def delay(self, *args):
            calls.append((self.name, args))

    monkeypatch.setattr(tasks, "generate_best_answers_task", _Recorder("best_answers"))
    monkeypatch.setattr(tasks, "analyze_resume_task", _Recorder("resume_analysis"))
    return calls


@pytest.fixture
def client(db, fake_llm):
    app.dependency_overrides[get_llm_client] = lambda: fake_llm
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_user(db, email="tester@example.com", name="测试用户"):
    user = User(name=name, email=email, password_hash=User.hash_password("secret123"))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers_for(user):
    token = AuthService.create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user(db):
    return make_user(db)


@pytest.fixture
def auth_headers(user):
    return auth_headers_for(user)


@pytest.fixture
def resume(db, user):
    resume = Resume(
        user_id=user.id,
        file_name="resume.docx",
        mime_type="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        file_size=1024,
        raw_text=RESUME_TEXT,
        parsed_content={"experienceLevel": "SENIOR", "techKeywords": ["React"]},
        tech_keywords=["React", "TypeScript"],
        projects=[],
        work_experience=[],
    )
    db.add(resume)
    db.commit()
    db.refresh(resume)
    return resume


@pytest.fixture
def resume_with_profile(db, resume):
    AIProfileService.upsert_profile(db, resume, SAMPLE_ANALYSIS, "ai")
    db.refresh(resume)
    return resume
