import io

import pytest
from docx import Document

from codemocklab.services import document_parser
from codemocklab.utils.exceptions import DocumentParseError


def build_docx(paragraphs):
    document = Document()
    for text in paragraphs:
        document.add_paragraph(text)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def test_extracts_docx_paragraphs():
    data = build_docx(["工作经历", "熟悉 React 与 TypeScript"])

    text = document_parser.extract_text(data, document_parser.DOCX_MIME)

    assert "工作经历" in text
    assert "熟悉 React 与 TypeScript" in text


def test_decodes_plain_text():
    text = document_parser.extract_text(
        "熟悉 Python 开发".encode("utf-8"), document_parser.TEXT_MIME
    )
    assert "Python" in text


def test_empty_payload_is_rejected():
    with pytest.raises(DocumentParseError):
        document_parser.extract_text(b"", document_parser.PDF_MIME)


def test_unsupported_type_is_rejected():
    with pytest.raises(DocumentParseError):
        document_parser.extract_text(b"hello", "image/png")


def test_corrupt_document_is_a_parse_error():
    with pytest.raises(DocumentParseError) as exc_info:
        document_parser.extract_text(b"not a real docx", document_parser.DOCX_MIME)

    assert exc_info.value.details["reason"]


def test_tech_keywords_are_unique_and_ordered():
    keywords = document_parser.extract_tech_keywords("React react Docker MySQL")
    assert keywords == ["React", "MySQL", "Docker"]


def test_projects_need_a_project_section():
    text = "项目经历\n电商平台项目 React Redux\n负责首屏性能优化"
    projects = document_parser.extract_projects(text)

    assert projects[0]["name"] == "电商平台项目 React Redux"
    assert projects[0]["technologies"] == ["React"]
    assert projects[0]["description"] == "负责首屏性能优化"
    assert document_parser.extract_projects("电商平台 React") == []


def test_work_experience_lines():
    text = "2019年-2024年 字节 前端工程师\n负责核心业务开发"
    experience = document_parser.extract_work_experience(text)

    assert experience == [
        {
            "company": "字节",
            "position": "工程师",
            "duration": "2019",
            "description": "负责核心业务开发",
        }
    ]


def test_education_degree_and_major():
    education = document_parser.extract_education("某某大学 软件工程 硕士")
    assert education == [
        {"school": "某某大学 软件工程 硕士", "degree": "硕士", "major": "软件工程"}
    ]


def test_experience_level_inference():
    assert document_parser.infer_experience_level("系统架构师", []) == "PRINCIPAL"
    assert document_parser.infer_experience_level("资深工程师", []) == "SENIOR"
    assert document_parser.infer_experience_level("实习生", [{}, {}, {}]) == "MID"
    assert document_parser.infer_experience_level("实习生", []) == "JUNIOR"


def test_parse_resume_combines_fields():
    data = build_docx(["某某大学 计算机 本科", "熟悉 Vue 和团队协作"])

    parsed = document_parser.parse_resume(data, document_parser.DOCX_MIME)

    assert parsed["techKeywords"] == ["Vue"]
    assert parsed["skills"] == ["Vue", "团队协作"]
    assert parsed["education"][0]["degree"] == "本科"
    assert parsed["experienceLevel"] == "JUNIOR"
