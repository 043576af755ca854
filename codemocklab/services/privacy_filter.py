"""
Résumé privacy filter.

Removes phone numbers, e-mail addresses, ID numbers, street addresses, bank
card numbers and social accounts from raw résumé text before it is shown or
sent to the LLM. Pattern families run in a fixed order over the same string,
so later families see the output of earlier redactions. Placeholders contain
no digits and can never be picked up by a later digit pattern.
"""

import re
from typing import Dict, List, Tuple

from pydantic import BaseModel, Field


PHONE_PLACEHOLDER = "[手机号已隐藏]"
ID_NUMBER_PLACEHOLDER = "[身份证号已隐藏]"
ADDRESS_PLACEHOLDER = "[详细地址已隐藏]"
UNKNOWN_CITY = "[城市]"
BANK_CARD_PLACEHOLDER = "[银行卡号已隐藏]"
SOCIAL_ACCOUNT_PLACEHOLDER = "[社交账号已隐藏]"


PATTERNS: Dict[str, List[re.Pattern]] = {
    # digit runs are matched whole so a longer number is never split
    "phone": [
        re.compile(r"(?<!\d)1[3-9]\d{9}(?!\d)"),  # mainland mobile
        re.compile(r"\+86\s*1[3-9]\d{9}(?!\d)"),
        re.compile(r"(?<!\d)\d{3}-\d{3}-\d{4}(?!\d)"),  # US format
        re.compile(r"(?<!\d)\d{3}\s\d{3}\s\d{4}(?!\d)"),
        re.compile(r"\(\d{3}\)\s?\d{3}-?\d{4}(?!\d)"),
    ],
    "email": [
        re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"),
    ],
    "idNumber": [
        re.compile(r"(?<!\d)(?:\d{17}[0-9Xx]|\d{15})(?!\d)"),
    ],
    "address": [
        re.compile(
            r"[省市区县][^\s]{2,20}[市区县][^\s]{2,20}[路街道][^\s]{1,30}[号栋单元室]"
        ),
        re.compile(r"\d{6}\s*[省市区县][^\s]{2,15}"),  # postcode + address
    ],
    "bankCard": [
        re.compile(r"(?<!\d)\d{16,19}(?!\d)"),
    ],
    "socialAccount": [
        re.compile(r"(?:QQ|qq)[:：\s]*\d{5,12}"),
        re.compile(r"(?:微信|wechat|WeChat)[:：\s]*[a-zA-Z0-9_-]{6,20}"),
    ],
}

CITY_PATTERN = re.compile(r"([省市区县][^\s]{2,10}[市区县])")


class SensitiveInfo(BaseModel):
    has_phone: bool = False
    has_email: bool = False
    has_address: bool = False
    has_id_number: bool = False


class FilteredResumeContent(BaseModel):
    filtered_text: str
    removed_fields: List[str] = Field(default_factory=list)
    sensitive_info: SensitiveInfo = Field(default_factory=SensitiveInfo)


def _mask_email(match: re.Match) -> str:
    domain = match.group(0).split("@", 1)[1]
    return f"[邮箱@{domain}]"


def _mask_address(match: re.Match) -> str:
    city_match = CITY_PATTERN.search(match.group(0))
    city = city_match.group(1) if city_match else UNKNOWN_CITY
    return f"{city}{ADDRESS_PLACEHOLDER}"


# field label -> (replacement, SensitiveInfo flag or None)
_REPLACEMENTS = {
    "phone": (PHONE_PLACEHOLDER, "has_phone"),
    "email": (_mask_email, "has_email"),
    "idNumber": (ID_NUMBER_PLACEHOLDER, "has_id_number"),
    "address": (_mask_address, "has_address"),
    "bankCard": (BANK_CARD_PLACEHOLDER, None),
    "socialAccount": (SOCIAL_ACCOUNT_PLACEHOLDER, None),
}


class PrivacyFilter:
    @staticmethod
    def filter_resume_content(content: str) -> FilteredResumeContent:
        filtered_text = content or ""
        removed_fields: List[str] = []
        sensitive_info = SensitiveInfo()

        for field, patterns in PATTERNS.items():
            replacement, flag = _REPLACEMENTS[field]
            for pattern in patterns:
                filtered_text, count = pattern.subn(replacement, filtered_text)
                if not count:
                    continue
                if flag:
                    setattr(sensitive_info, flag, True)
                if field not in removed_fields:
                    removed_fields.append(field)

        return FilteredResumeContent(
            filtered_text=filtered_text,
            removed_fields=removed_fields,
            sensitive_info=sensitive_info,
        )

    @staticmethod
    def has_sensitive_info(content: str) -> bool:
        return any(
            pattern.search(content or "")
            for patterns in PATTERNS.values()
            for pattern in patterns
        )

    @staticmethod
    def extract_useful_info(content: str) -> Dict[str, List[str]]:
        lines = [line.strip() for line in (content or "").split("\n") if line.strip()]

        education_keywords = ["大学", "学院", "专业", "学历", "本科", "硕士", "博士", "毕业"]
        work_keywords = ["公司", "工作", "职位", "经验", "年", "开发", "负责"]
        skill_keywords = ["技能", "熟悉", "精通", "掌握", "了解", "使用"]
        project_keywords = ["项目", "系统", "平台", "开发", "设计", "实现"]

        def matching(keywords):
            return [line for line in lines if any(k in line for k in keywords)]

        return {
            "educationInfo": matching(education_keywords),
            "workExperience": matching(work_keywords),
            "skills": matching(skill_keywords),
            "projectKeywords": matching(project_keywords),
        }


SECTION_TAGS: List[Tuple[List[str], str]] = [
    (["基本信息", "个人信息"], "[PERSONAL_INFO]"),
    (["教育经历", "教育背景"], "[EDUCATION]"),
    (["工作经历", "工作经验"], "[WORK_EXPERIENCE]"),
    (["项目经历", "项目经验"], "[PROJECTS]"),
    (["专业技能", "技能"], "[SKILLS]"),
    (["自我评价", "个人评价"], "[SELF_EVALUATION]"),
]


class ResumePreprocessor:
    """Filters a résumé and tags its sections before it is sent to the LLM."""

    @staticmethod
    def preprocess_for_ai(content: str) -> Tuple[str, Dict]:
        content = content or ""
        filtered = PrivacyFilter.filter_resume_content(content)
        structured = ResumePreprocessor.structure_content(filtered.filtered_text)

        metadata = {
            "originalLength": len(content),
            "filteredLength": len(filtered.filtered_text),
            "removedFields": filtered.removed_fields,
            "hasContactInfo": filtered.sensitive_info.has_phone
            or filtered.sensitive_info.has_email,
        }
        return structured, metadata

    @staticmethod
    def structure_content(content: str) -> str:
        structured = content
        for keywords, tag in SECTION_TAGS:
            # longest keyword first so "专业技能" is tagged once, not twice
            alternation = "|".join(
                re.escape(k) for k in sorted(keywords, key=len, reverse=True)
            )
            structured = re.sub(f"({alternation})", rf"{tag} \1", structured)
        return structured
