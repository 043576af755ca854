from codemocklab.services.privacy_filter import (
    ADDRESS_PLACEHOLDER,
    BANK_CARD_PLACEHOLDER,
    ID_NUMBER_PLACEHOLDER,
    PHONE_PLACEHOLDER,
    SOCIAL_ACCOUNT_PLACEHOLDER,
    PrivacyFilter,
    ResumePreprocessor,
)


def test_phone_and_email_are_masked():
    result = PrivacyFilter.filter_resume_content(
        "电话：13812345678 邮箱：zhangsan@example.com"
    )

    assert PHONE_PLACEHOLDER in result.filtered_text
    assert "[邮箱@example.com]" in result.filtered_text
    assert "13812345678" not in result.filtered_text
    assert "zhangsan" not in result.filtered_text
    assert result.removed_fields == ["phone", "email"]
    assert result.sensitive_info.has_phone
    assert result.sensitive_info.has_email
    assert not result.sensitive_info.has_address


def test_id_number_is_masked():
    result = PrivacyFilter.filter_resume_content("身份证 440301200001010022")

    assert ID_NUMBER_PLACEHOLDER in result.filtered_text
    assert "440301200001010022" not in result.filtered_text
    assert result.sensitive_info.has_id_number
    assert "idNumber" in result.removed_fields


def test_address_keeps_city_prefix():
    result = PrivacyFilter.filter_resume_content("住址：广东省深圳市南山区科技路100号")

    assert ADDRESS_PLACEHOLDER in result.filtered_text
    assert "科技路" not in result.filtered_text
    assert result.sensitive_info.has_address


def test_social_accounts_are_masked():
    result = PrivacyFilter.filter_resume_content("QQ: 12345678 微信：zhang_dev2024")

    assert result.filtered_text.count(SOCIAL_ACCOUNT_PLACEHOLDER) == 2
    assert "socialAccount" in result.removed_fields


def test_clean_text_is_untouched():
    text = "熟悉 Python 与 Django，有5年后端开发经验"
    result = PrivacyFilter.filter_resume_content(text)

    assert result.filtered_text == text
    assert result.removed_fields == []
    assert not PrivacyFilter.has_sensitive_info(text)


def test_filter_handles_empty_input():
    result = PrivacyFilter.filter_resume_content("")
    assert result.filtered_text == ""
    assert result.removed_fields == []


def test_extract_useful_info_groups_lines():
    info = PrivacyFilter.extract_useful_info("某某大学 计算机专业\n熟悉 React\n电商平台项目")

    assert info["educationInfo"] == ["某某大学 计算机专业"]
    assert "熟悉 React" in info["skills"]
    assert "电商平台项目" in info["projectKeywords"]


def test_section_tags_are_applied_once():
    structured = ResumePreprocessor.structure_content("专业技能：Python\n工作经历：字节")

    assert structured.count("[SKILLS]") == 1
    assert "[SKILLS] 专业技能" in structured
    assert "[WORK_EXPERIENCE] 工作经历" in structured


def test_preprocess_reports_metadata():
    content = "电话 13812345678\n专业技能 Python"
    processed, metadata = ResumePreprocessor.preprocess_for_ai(content)

    assert PHONE_PLACEHOLDER in processed
    assert metadata["originalLength"] == len(content)
    assert metadata["removedFields"] == ["phone"]
    assert metadata["hasContactInfo"] is True


def test_phone_without_separator():
    result = PrivacyFilter.filter_resume_content("联系电话13800138000")

    assert result.filtered_text == "联系电话[手机号已隐藏]"
    assert result.removed_fields == ["phone"]


def test_id_number_is_not_split_by_phone_pattern():
    result = PrivacyFilter.filter_resume_content("身份证 110101199003071234")

    assert result.filtered_text == f"身份证 {ID_NUMBER_PLACEHOLDER}"
    assert result.removed_fields == ["idNumber"]
    assert not result.sensitive_info.has_phone


def test_id_number_with_check_letter():
    result = PrivacyFilter.filter_resume_content("证件号：11010119900307123X，已婚")

    assert result.filtered_text == f"证件号：{ID_NUMBER_PLACEHOLDER}，已婚"


def test_card_number_is_reported_as_bank_card():
    result = PrivacyFilter.filter_resume_content("工资卡 6222021234567890")

    assert result.filtered_text == f"工资卡 {BANK_CARD_PLACEHOLDER}"
    assert result.removed_fields == ["bankCard"]
