"""Local keyword analysis used whenever the LLM résumé analysis is unusable."""

from typing import Dict, List

KNOWN_TECHNOLOGIES = [
    "JavaScript", "TypeScript", "Python", "Java", "Go", "Rust",
    "React", "Vue", "Angular", "Node.js", "Spring", "Django",
    "MySQL", "PostgreSQL", "MongoDB", "Redis",
    "Docker", "Kubernetes", "AWS", "Azure",
    "Git", "Linux", "Nginx",
]

TECH_CATEGORIES = {
    "语言": ["JavaScript", "TypeScript", "Python", "Java", "Go", "Rust"],
    "框架": ["React", "Vue", "Angular", "Spring", "Django"],
    "数据库": ["MySQL", "PostgreSQL", "MongoDB", "Redis"],
    "工具": ["Docker", "Kubernetes", "Git", "Linux", "Nginx"],
    "平台": ["AWS", "Azure", "Node.js"],
}
OTHER_CATEGORY = "其他"

SPECIALIZATION_GROUPS = [
    ("前端开发", ["React", "Vue", "Angular"]),
    ("后端开发", ["Spring", "Django", "Node.js"]),
    ("DevOps", ["Docker", "Kubernetes", "AWS"]),
    ("数据库", ["MySQL", "PostgreSQL", "MongoDB"]),
]
DEFAULT_SPECIALIZATION = "全栈开发"


def extract_tech_keywords(content: str) -> List[str]:
    text = (content or "").lower()
    return [tech for tech in KNOWN_TECHNOLOGIES if tech.lower() in text]


def categorize_tech(tech: str) -> str:
    for category, techs in TECH_CATEGORIES.items():
        if tech in techs:
            return category
    return OTHER_CATEGORY


def determine_experience_level(content: str) -> str:
    text = (content or "").lower()
    if "高级" in text or "架构师" in text or "技术负责人" in text:
        return "senior"
    if "3年" in text or "4年" in text or "5年" in text:
        return "mid"
    if "1年" in text or "2年" in text or "应届" in text:
        return "junior"
    return "mid"


def determine_specializations(tech_stack: List[str]) -> List[str]:
    specializations = [
        name
        for name, techs in SPECIALIZATION_GROUPS
        if any(tech in techs for tech in tech_stack)
    ]
    return specializations or [DEFAULT_SPECIALIZATION]


def analyze(content: str) -> Dict:
    """
    Build a résumé analysis from fixed keyword tables.

    Returns the same shape as a parsed LLM analysis. Never raises and never
    produces a question bank: ``simulatedInterview`` is always None.
    """
    tech_keywords = extract_tech_keywords(content)

    return {
        "techStack": [
            {
                "technology": tech,
                "category": categorize_tech(tech),
                "proficiency": "中级",
                "valueScore": max(60, 100 - index * 5),
                "evidenceCount": 1,
                "lastUsed": "近期",
            }
            for index, tech in enumerate(tech_keywords)
        ],
        "techHighlights": [
            "具备多项技术栈经验",
            "有实际项目开发经验",
            "技术学习能力较强",
        ],
        "projectAnalysis": [
            {
                "projectName": "项目经验",
                "description": "从简历中识别的项目经验",
                "techStack": tech_keywords[:5],
                "complexity": "中等",
                "impact": "业务价值贡献",
                "role": "开发工程师",
                "highlights": ["技术实现", "项目交付"],
            }
        ],
        "skillAssessment": {
            "technical": 75,
            "communication": 70,
            "leadership": 65,
            "learning": 80,
        },
        "experienceLevel": {
            "level": determine_experience_level(content),
            "confidence": 0.7,
            "reasoning": "基于项目复杂度和技术栈广度评估",
        },
        "specializations": determine_specializations(tech_keywords),
        "careerSuggestions": [
            "继续深化主技术栈",
            "增强系统设计能力",
            "提升项目管理技能",
        ],
        "roleMatchingAnalysis": {
            "前端开发": 80,
            "全栈开发": 75,
            "后端开发": 70,
        },
        "simulatedInterview": None,
    }
