# Best answers
BEST_ANSWER_FAILED_PLACEHOLDER = "最佳答案生成失败，请稍后重试"

# Resume upload
ALLOWED_RESUME_MIME_TYPES = [
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
]
RESUME_CONTENT_MIN_LENGTH = 50
RESUME_CONTENT_MAX_LENGTH = 50000

# Question bank categories stored in AIProfile.simulated_interview
# (key, question type, display name)
BANK_CATEGORIES = [
    ("architectureDesign", "system-design", "系统架构设计"),
    ("systemDesign", "system-design", "系统设计"),
    ("algorithmCoding", "coding", "算法编程"),
    ("problemSolving", "technical", "问题解决"),
    ("projectExperience", "behavioral", "项目经验"),
    ("industryInsight", "technical", "行业洞察"),
    ("leadership", "behavioral", "领导力管理"),
]
TECH_DEPTH_CATEGORY = "techDepth"
TECH_DEPTH_LABEL = "技术深度"

# Interview
INTERVIEW_MODE_BANK_ONLY = "ai-bank-only"
REALTIME_CATEGORY = "ai-realtime"
DEFAULT_QUESTION_CATEGORY = "技术面试"
FOLLOW_UP_SCORE_RANGE = (40, 80)  # exclusive bounds

# Job preferences
JOB_PREFERENCE_LIST_LIMIT = 10
VALID_JOB_LEVELS = ["junior", "mid", "senior", "lead", "principal"]

# Reports
REPORT_TIMEZONE = "Asia/Shanghai"
INTERVIEW_REPORT_TEMPLATE = "reports/interview_report.html"
ALL_QUESTIONS_REPORT_TEMPLATE = "reports/all_questions_report.html"
