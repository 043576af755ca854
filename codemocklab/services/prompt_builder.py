"""
Prompt templates for every LLM operation.

Each builder renders its structured inputs into labelled sections and ends
with the exact JSON schema the reply must follow. The schema text is the
only contract with the model, so replies still go through
``response_parser.parse_llm_json`` before use.
"""

from typing import Dict, List, Optional

from ..core.constants import BANK_CATEGORIES, TECH_DEPTH_CATEGORY

SYSTEM_PROMPT = "你是一位专业的技术面试官，具有丰富的面试经验。请严格按照要求的JSON格式返回结果。"

DIFFICULTY_LABELS = {"easy": "初级", "medium": "中级", "hard": "高级"}


def _numbered(items: List[str]) -> str:
    return "\n".join(f"{index}. {item}" for index, item in enumerate(items, 1))


def _bullets(items: List[str], empty: str) -> str:
    return "\n".join(f"- {item}" for item in items) if items else f"- {empty}"


def build_resume_analysis_prompt(content: str) -> str:
    bank_keys = ", ".join(f'"{key}"' for key, _, _ in BANK_CATEGORIES)
    return f"""你是一位资深的技术招聘专家和简历分析师，请对以下简历进行全面的技术画像分析。

## 简历内容
{content}

## 分析要求
请从以下维度进行分析，并返回JSON格式的结构化数据：

1. techStack：候选人掌握的技术，按市场价值从高到低排序。每项包含
   technology, category(语言/框架/数据库/工具/平台), proficiency(初级/中级/高级/专家),
   valueScore(0-100), dominanceScore(0-100, 该技术在简历中的主导程度),
   evidenceCount(简历中的证据数量), lastUsed(最近使用时间估计)
2. techHighlights：3-5个最突出的技术亮点
3. projectAnalysis：每个重要项目的 projectName, description, techStack,
   complexity(简单/中等/复杂/高级), impact, role, highlights, interviewQuestions
4. skillAssessment：主要能力维度评分(0-100)
5. experienceLevel：level(junior/mid/senior/lead), confidence(0-1), reasoning
6. specializations：专业领域
7. careerSuggestions：职业发展建议
8. roleMatchingAnalysis：岗位名称到匹配度百分比的映射
9. simulatedInterview：模拟面试题库，键为 {bank_keys}，值为问题列表；
   "{TECH_DEPTH_CATEGORY}" 为技术名称到问题列表的映射

## 输出格式
请返回严格的JSON格式，不要包含任何解释文字：
{{
  "techStack": [{{"technology": "React", "category": "框架", "proficiency": "高级", "valueScore": 90, "dominanceScore": 85, "evidenceCount": 3, "lastUsed": "2024"}}],
  "techHighlights": ["亮点1"],
  "projectAnalysis": [{{"projectName": "项目", "description": "描述", "techStack": ["React"], "complexity": "复杂", "impact": "影响", "role": "角色", "highlights": ["亮点"], "interviewQuestions": ["问题"]}}],
  "skillAssessment": {{"technical": 80, "communication": 75}},
  "experienceLevel": {{"level": "mid", "confidence": 0.8, "reasoning": "理由"}},
  "specializations": ["前端开发"],
  "careerSuggestions": ["建议1"],
  "roleMatchingAnalysis": {{"前端开发": 85}},
  "simulatedInterview": {{"systemDesign": ["问题"], "{TECH_DEPTH_CATEGORY}": {{"React": ["问题"]}}}}
}}"""


def _render_ai_profile(ai_profile: Dict) -> str:
    confidence = round((ai_profile.get("experienceLevelConfidence") or 0.7) * 100)
    tech_lines = [
        f"{tech.get('technology')} ({tech.get('category')}, {tech.get('proficiency')}, 价值评分: {tech.get('valueScore')})"
        for tech in (ai_profile.get("techStack") or [])[:8]
    ]
    project_lines = [
        f"{project.get('projectName')}：{project.get('complexity')}复杂度，技术栈：{', '.join((project.get('techStack') or [])[:3])}"
        for project in (ai_profile.get("projectAnalysis") or [])[:3]
    ]
    role_lines = [
        f"{role}: {score}%匹配"
        for role, score in list((ai_profile.get("roleMatchingAnalysis") or {}).items())[:3]
    ]
    return f"""### 经验等级评估
- AI评估等级：{ai_profile.get("experienceLevel") or "mid"}（置信度：{confidence}%）

### 技术专长领域
- 专业方向：{", ".join(ai_profile.get("specializations") or []) or "全栈开发"}

### 核心技术栈（按价值排序）
{_bullets(tech_lines, "未分析到具体技术栈")}

### 技术亮点
{_bullets((ai_profile.get("techHighlights") or [])[:5], "具备基础技术能力")}

### 项目经验分析
{_bullets(project_lines, "有一定项目经验")}

### 岗位匹配度分析
{_bullets(role_lines, "需要进一步评估匹配度")}"""


def _render_resume_profile(resume_profile: Dict) -> str:
    work = "; ".join(
        f"{w.get('position')} at {w.get('company')}"
        for w in resume_profile.get("workExperience") or []
    )
    return f"""### 基础简历信息
- 经验级别：{resume_profile.get("experienceLevel") or "中级"}
- 技术关键词：{", ".join(resume_profile.get("techKeywords") or []) or "未知"}
- 项目经验：{len(resume_profile.get("projects") or [])}个项目
- 工作背景：{work or "未知"}"""


def build_question_generation_prompt(
    resume_profile: Dict,
    job_data: Dict,
    ai_profile: Optional[Dict] = None,
    count: int = 5,
) -> str:
    responsibilities = job_data.get("jobResponsibilities") or []
    requirements = job_data.get("jobRequirements") or []

    responsibilities_section = (
        f"**具体工作职责**：\n{_numbered(responsibilities)}\n针对每项核心职责设计实际工作场景问题。"
        if responsibilities
        else "未提供具体职责，请基于岗位名称推断常见工作场景。"
    )
    requirements_section = (
        f"**具体任职要求**：\n{_numbered(requirements)}\n针对硬技能、软技能和经验要求逐项验证。"
        if requirements
        else "未提供详细要求，请重点考察基础技术能力和学习适应性。"
    )
    profile_section = (
        _render_ai_profile(ai_profile) if ai_profile else _render_resume_profile(resume_profile)
    )

    return f"""你是一位资深的技术面试官，拥有10年以上的面试经验。请基于以下信息生成{count}道高质量的技术面试题。

## 目标岗位
- 公司：{job_data.get("company") or "目标公司"}
- 职位：{job_data.get("position") or "软件工程师"}
- 级别：{job_data.get("level") or "mid"}
- 基础技术要求：{", ".join(job_data.get("requirements") or []) or "未知"}

## 工作职责（权重30%）
{responsibilities_section}

## 任职要求（权重25%）
{requirements_section}

## 候选人技术画像（权重35%）
{profile_section}

## 出题要求
1. 工作场景问题30%，技术深度问题25%，系统设计问题20%，能力验证问题15%，综合应用问题10%
2. 难度随经验等级调整：高级以困难和中等为主，中级以中等为主，初级以简单和中等为主
3. 每道题都要对应一个具体的职责、要求或技能点

## 输出格式
请严格按照以下JSON格式返回（不要包含其他内容）：
{{
  "questions": [
    {{
      "id": "q1",
      "content": "具体的问题描述",
      "type": "technical/behavioral/system-design/coding/scenario",
      "difficulty": "easy/medium/hard",
      "topics": ["相关技术点1", "相关技术点2"],
      "expectedKeywords": ["期望答案包含的关键词"],
      "followUps": ["可能的追问1"],
      "evaluationCriteria": "评估标准描述",
      "category": "工作场景/技术深度/系统设计/能力验证/综合应用"
    }}
  ]
}}"""


def build_evaluation_prompt(
    question: str,
    answer: str,
    question_type: str,
    expected_keywords: Optional[List[str]] = None,
) -> str:
    keywords_section = (
        f"\n## 期望包含的关键点\n{', '.join(expected_keywords)}\n" if expected_keywords else ""
    )
    return f"""你是一位专业的技术面试评估专家。请评估以下面试回答：

## 面试问题
{question}

## 候选人回答
{answer}

## 问题类型
{question_type}
{keywords_section}
## 评估要求
1. 从技术准确性、思路清晰度、完整性、实践经验四个维度评估
2. 给出0-100的综合评分
3. 指出回答的优点和不足，并提供具体的改进建议

## 输出格式
请严格按照以下JSON格式返回：
{{
  "score": 85,
  "feedback": "总体评价（100字以内）",
  "strengths": ["优点1", "优点2"],
  "improvements": ["改进点1", "改进点2"],
  "suggestions": ["学习建议1", "学习建议2"],
  "dimensions": {{"technical": 90, "clarity": 85, "completeness": 80, "practical": 85}}
}}"""


def build_follow_up_prompt(question: str, answer: str) -> str:
    return f"""基于候选人的回答，生成一个深入的追问：

原始问题：{question}
候选人回答：{answer}

要求：
1. 基于回答中的薄弱点或可深入的点
2. 测试更深层次的理解，探讨实际应用或边界情况
3. 问题具体、清晰、有针对性

直接返回追问内容（一句话，不超过50字）："""


def build_best_answer_prompt(
    question: str,
    question_type: str,
    difficulty: str,
    topics: Optional[List[str]] = None,
) -> str:
    level = DIFFICULTY_LABELS.get(difficulty, "专家级")
    if question_type == "system-design":
        focus = "需求分析 → 架构设计 → 技术选型 → 扩展考虑，分析可用性、一致性和性能瓶颈"
    elif question_type in ("coding", "algorithm"):
        focus = "思路分析 → 算法设计 → 复杂度分析 → 代码实现，考虑边界条件"
    elif question_type in ("technical", "technical-knowledge"):
        focus = "核心原理解释 + 具体实现方案，对比不同方案的优劣并给出实际应用场景"
    else:
        focus = "结合具体场景和实际经验，展现问题分析和沟通表达能力"

    return f"""你是一位资深的技术架构师和面试专家，拥有15年以上的行业经验。请为以下面试问题提供一个标准答案示例。

## 面试问题
**问题内容**: {question}
**问题类型**: {question_type}
**难度等级**: {difficulty}
**技术领域**: {", ".join(topics or []) or "通用技术"}

## 答案要求
1. 体现{level}水平的技术深度，解释核心原理和实现要点
2. 按照 概述→深入→实践→总结 的结构组织
3. 包含最佳实践、常见陷阱和性能考量
4. 针对性：{focus}
5. 直接进入正题，长度300-800字

现在，请提供这个问题的标准答案："""


def build_report_prompt(interview: Dict, questions: List[Dict]) -> str:
    qa_blocks = "\n".join(
        f"问题{index}（{q.get('type')}）：{q.get('content')}\n回答：{q.get('userAnswer') or '未回答'}\n"
        for index, q in enumerate(questions, 1)
    )
    return f"""作为资深技术面试官，请基于以下面试记录生成综合评估报告：

## 面试信息
- 目标公司：{interview.get("targetCompany") or "未知公司"}
- 目标职位：{interview.get("targetPosition") or "未知职位"}
- 面试时长：{interview.get("durationMinutes")}分钟

## 问答记录
{qa_blocks}
## 评估要求
1. 综合评估候选人的技术能力、沟通能力、问题解决能力
2. 识别候选人的优势和不足，并提供具体的改进建议
3. 给出是否推荐录用的建议

## 输出格式
请严格按照以下JSON格式返回：
{{
  "overallScore": 85,
  "technicalScore": 88,
  "communicationScore": 82,
  "problemSolvingScore": 85,
  "strengths": ["优势1", "优势2"],
  "weaknesses": ["不足1", "不足2"],
  "recommendations": ["建议1", "建议2"],
  "hiringRecommendation": "强烈推荐/推荐/考虑/不推荐"
}}"""


def build_answer_comparison_prompt(
    question: str, current_answer: str, candidate_answer: str
) -> str:
    return f"""你是一位资深的技术面试专家。请对比以下两个面试问题的答案，选择更好的一个。

## 面试问题
{question}

## 答案A（现有最佳答案）
{current_answer}

## 答案B（新答案）
{candidate_answer}

## 评估标准
技术准确性、完整性、实用性、清晰度、时效性

## 输出格式
请严格按照以下JSON格式返回结果：
{{
  "betterAnswer": "A 或 B",
  "reason": "选择理由（100字以内）",
  "improvements": ["改进建议1", "改进建议2"],
  "confidenceScore": 85
}}"""
