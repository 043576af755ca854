from typing import Any, Optional


class AppError(Exception):
    """Base exception for errors surfaced to API clients"""

    code = "INTERNAL_SERVER_ERROR"
    status_code = 500
    default_message = "服务器内部错误"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Any = None,
    ):
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class UnauthorizedError(AppError):
    code = "UNAUTHORIZED"
    status_code = 401
    default_message = "未授权访问"


class ForbiddenError(AppError):
    code = "FORBIDDEN"
    status_code = 403
    default_message = "无权限访问"


class InvalidInputError(AppError):
    code = "INVALID_INPUT"
    status_code = 400
    default_message = "输入数据无效"


class MissingFieldError(InvalidInputError):
    code = "MISSING_REQUIRED_FIELD"

    def __init__(self, field_name: str):
        super().__init__(f"缺少必需字段: {field_name}", details={"field": field_name})


class NotFoundError(AppError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "资源未找到"


class ResumeNotFoundError(NotFoundError):
    code = "RESUME_NOT_FOUND"
    default_message = "简历未找到"


class InterviewNotFoundError(NotFoundError):
    code = "INTERVIEW_NOT_FOUND"
    default_message = "面试未找到"


class QuestionNotFoundError(NotFoundError):
    code = "QUESTION_NOT_FOUND"
    default_message = "题目未找到"


class AIServiceUnavailableError(AppError):
    code = "AI_SERVICE_UNAVAILABLE"
    status_code = 503
    default_message = "AI服务不可用"


class DatabaseError(AppError):
    code = "DATABASE_ERROR"
    status_code = 500
    default_message = "数据库操作失败"


class FileUploadError(AppError):
    code = "FILE_UPLOAD_ERROR"
    status_code = 400
    default_message = "文件上传失败"


class FileSizeExceededError(FileUploadError):
    code = "FILE_SIZE_EXCEEDED"

    def __init__(self, max_size_bytes: int):
        max_mb = max_size_bytes // (1024 * 1024)
        super().__init__(
            f"文件大小超过限制 ({max_mb}MB)", details={"maxSize": max_size_bytes}
        )


class UnsupportedFileTypeError(FileUploadError):
    code = "UNSUPPORTED_FILE_TYPE"

    def __init__(self, supported_types):
        super().__init__(
            f"不支持的文件类型，支持: {', '.join(supported_types)}",
            details={"supportedTypes": list(supported_types)},
        )


class DocumentParseError(FileUploadError):
    code = "DOCUMENT_PARSE_ERROR"
    default_message = "简历解析失败"


class LLMError(Exception):
    """Base exception for LLM client errors"""

    pass


class UpstreamError(LLMError):
    """Non-2xx reply from the LLM provider"""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"LLM API error: {status_code} - {body[:200]}")


class LLMTimeoutError(LLMError):
    """LLM call exceeded the client-side timeout"""

    pass
