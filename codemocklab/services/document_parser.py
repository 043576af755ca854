"""
Document ingestion for résumé uploads.

Extracts plain text from PDF (pdfplumber), Word (python-docx) and plain-text
(chardet-guided decoding) payloads, then derives coarse structured fields
with keyword heuristics: tech keywords, projects, work experience,
education, skills and an experience level.
"""

import io
import re
from typing import Dict, List

import chardet
import pdfplumber
from docx import Document

from ..core.logger import get_logger
from ..utils.exceptions import DocumentParseError

logger = get_logger(__name__)

PDF_MIME = "application/pdf"
DOC_MIME = "application/msword"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_MIME = "text/plain"

TECH_KEYWORDS = [
    # languages
    "JavaScript", "TypeScript", "Python", "Java", "Go", "Rust", "C++", "C#",
    "PHP", "Ruby", "Swift", "Kotlin",
    # frontend
    "React", "Vue", "Angular", "Next.js", "Nuxt.js", "HTML", "CSS", "Tailwind",
    "Bootstrap", "SCSS", "Less",
    # backend
    "Node.js", "Express", "Nest.js", "Spring", "Django", "Flask", "Laravel",
    "Rails", "ASP.NET",
    # databases
    "MySQL", "PostgreSQL", "MongoDB", "Redis", "SQLite", "Oracle", "SQL Server",
    "Elasticsearch",
    # cloud and tooling
    "AWS", "Azure", "GCP", "Docker", "Kubernetes", "Jenkins", "CI/CD", "Git",
    "GitHub", "GitLab",
    # other
    "GraphQL", "REST API", "WebSocket", "Microservices", "DevOps", "Linux",
    "Nginx", "Apache",
]

SOFT_SKILLS = ["团队协作", "沟通能力", "项目管理", "敏捷开发", "Scrum", "产品设计", "UI/UX"]
KNOWN_COMPANIES = ["腾讯", "阿里", "百度", "字节", "美团", "京东", "网易", "滴滴", "小米", "华为"]
KNOWN_POSITIONS = [
    "高级工程师", "资深工程师", "工程师", "架构师", "技术专家",
    "开发工程师", "前端工程师", "后端工程师",
]
KNOWN_MAJORS = ["计算机", "软件工程", "信息技术", "电子", "通信", "数学", "物理"]

MAX_PROJECTS = 5
MAX_WORK_EXPERIENCE = 10


def _extract_pdf(data: bytes) -> str:
    pages = []
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        for page_num, page in enumerate(pdf.pages, 1):
            page_text = page.extract_text()
            if page_text:
                pages.append(page_text)
            logger.debug(
                f"pdf page {page_num} processed, {len(page_text or '')} chars"
            )
    return "\n".join(pages)


def _extract_docx(data: bytes) -> str:
    document = Document(io.BytesIO(data))
    lines = [paragraph.text for paragraph in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            lines.append(" ".join(cell.text for cell in row.cells))
    return "\n".join(lines)


def _decode_text(data: bytes) -> str:
    detected = chardet.detect(data)
    encoding = detected.get("encoding") or "utf-8"
    try:
        return data.decode(encoding)
    except (UnicodeDecodeError, LookupError):
        return data.decode("utf-8", errors="replace")


def extract_text(data: bytes, mime_type: str) -> str:
    """Return the raw text of an uploaded document."""
    if not data:
        raise DocumentParseError("文件内容为空")

    try:
        if mime_type == PDF_MIME:
            text = _extract_pdf(data)
        elif mime_type in (DOC_MIME, DOCX_MIME) or "word" in (mime_type or ""):
            text = _extract_docx(data)
        elif mime_type == TEXT_MIME:
            text = _decode_text(data)
        else:
            raise DocumentParseError(f"Unsupported file type: {mime_type}")
    except DocumentParseError:
        raise
    except Exception as e:
        logger.error(f"Resume parsing error ({mime_type}): {str(e)}")
        raise DocumentParseError("Failed to parse resume", details={"reason": str(e)})

    logger.info(f"Extracted {len(text)} characters from {mime_type} document")
    return text


def extract_tech_keywords(text: str) -> List[str]:
    lower_text = (text or "").lower()
    found = []
    for keyword in TECH_KEYWORDS:
        if keyword.lower() in lower_text and keyword not in found:
            found.append(keyword)
    return found


def extract_projects(text: str) -> List[Dict]:
    projects = []
    if not re.search(r"项目经验|项目经历|主要项目|Project", text, re.IGNORECASE):
        return projects

    lines = text.split("\n")
    for i, raw_line in enumerate(lines):
        line = raw_line.strip()
        if re.search(r"项目|project", line, re.IGNORECASE) and len(line) < 100:
            techs = extract_tech_keywords(line)
            if techs:
                projects.append(
                    {
                        "name": re.sub(r"[：:]", "", line).strip(),
                        "description": lines[i + 1].strip() if i + 1 < len(lines) else "",
                        "technologies": techs,
                    }
                )
    return projects[:MAX_PROJECTS]


def _company_name(line: str) -> str:
    for company in KNOWN_COMPANIES:
        if company in line:
            return company
    return line.split(" ")[0] or "未知公司"


def _position(line: str) -> str:
    for position in KNOWN_POSITIONS:
        if position in line:
            return position
    return "工程师"


def extract_work_experience(text: str) -> List[Dict]:
    experience = []
    lines = text.split("\n")
    for i, raw_line in enumerate(lines):
        line = raw_line.strip()
        if not re.search(r"工程师|开发|程序员|架构师|技术|CTO|CIO|主管|经理", line):
            continue
        date_match = re.search(r"(\d{4}[-年]\d{1,2}|\d{4})", line)
        if date_match:
            experience.append(
                {
                    "company": _company_name(line),
                    "position": _position(line),
                    "duration": date_match.group(0),
                    "description": lines[i + 1].strip() if i + 1 < len(lines) else "",
                }
            )
    return experience[:MAX_WORK_EXPERIENCE]


def _degree(line: str) -> str:
    if "博士" in line or "PhD" in line:
        return "博士"
    if "硕士" in line or "Master" in line:
        return "硕士"
    if "本科" in line or "Bachelor" in line:
        return "本科"
    return "学士"


def _major(line: str) -> str:
    for major in KNOWN_MAJORS:
        if major in line:
            return major
    return "计算机相关"


def extract_education(text: str) -> List[Dict]:
    return [
        {"school": line.strip(), "degree": _degree(line), "major": _major(line)}
        for line in text.split("\n")
        if re.search(r"大学|学院|university|college", line, re.IGNORECASE)
    ]


def extract_skills(text: str) -> List[str]:
    skills = extract_tech_keywords(text)
    lower_text = text.lower()
    for skill in SOFT_SKILLS:
        if skill.lower() in lower_text and skill not in skills:
            skills.append(skill)
    return skills


def infer_experience_level(text: str, work_experience: List[Dict]) -> str:
    lower_text = text.lower()
    if "首席" in lower_text or "principal" in lower_text or "架构师" in lower_text:
        return "PRINCIPAL"
    if "技术专家" in lower_text or "lead" in lower_text or "团队负责人" in lower_text:
        return "LEAD"
    if "资深" in lower_text or "高级" in lower_text or "senior" in lower_text:
        return "SENIOR"
    if len(work_experience) >= 3:
        return "MID"
    return "JUNIOR"


def analyze_text(text: str) -> Dict:
    """Keyword heuristics over already extracted résumé text."""
    text = text or ""
    work_experience = extract_work_experience(text)
    return {
        "rawText": text,
        "techKeywords": extract_tech_keywords(text),
        "projects": extract_projects(text),
        "workExperience": work_experience,
        "experienceLevel": infer_experience_level(text, work_experience),
        "education": extract_education(text),
        "skills": extract_skills(text),
    }


def parse_resume(data: bytes, mime_type: str) -> Dict:
    return analyze_text(extract_text(data, mime_type))
