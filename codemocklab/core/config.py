from pydantic_settings import BaseSettings
from typing import List, Optional
from functools import lru_cache
import logging


class Settings(BaseSettings):
    # App Settings
    APP_NAME: str = "CodeMockLab"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    AUTO_CREATE_TABLES: bool = True

    # Database Settings
    DATABASE_URL: str
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30

    # Session provider
    NEXTAUTH_URL: str
    NEXTAUTH_SECRET: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    # AI providers (at least one is expected)
    DEEPSEEK_API_KEY: Optional[str] = None
    OPENAI_API_KEY: Optional[str] = None
    ANTHROPIC_API_KEY: Optional[str] = None
    DEEPSEEK_API_URL: str = "https://api.deepseek.com/v1/chat/completions"
    DEEPSEEK_MODEL: str = "deepseek-chat"
    LLM_TIMEOUT_SECONDS: float = 30
    RESUME_ANALYSIS_TIMEOUT_SECONDS: float = 240

    # Interview settings
    UPLOAD_MAX_SIZE: int = 10 * 1024 * 1024  # 10MB
    INTERVIEW_DURATION_DEV: int = 120  # seconds
    INTERVIEW_DURATION_PROD: int = 3600  # seconds
    BANK_GENERATED_QUESTION_COUNT: int = 3
    REALTIME_QUESTION_COUNT: int = 5

    # Best answer backfill
    BEST_ANSWER_BATCH_SIZE: int = 3
    BEST_ANSWER_BATCH_DELAY_SECONDS: float = 0.5
    BEST_ANSWER_CONTRIBUTION_MIN_SCORE: int = 85
    BEST_ANSWER_REPLACE_CONFIDENCE: int = 70

    # Celery / Redis Configuration
    REDIS_URL: Optional[str] = None
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/1"

    # Rate limiting (per client, per minute)
    RATE_LIMIT_PER_MINUTE: int = 20

    allowed_origins: List[str] = ["http://localhost:3000"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "allow"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    def available_ai_services(self) -> List[str]:
        services = []
        if self.DEEPSEEK_API_KEY:
            services.append("deepseek")
        if self.OPENAI_API_KEY:
            services.append("openai")
        if self.ANTHROPIC_API_KEY:
            services.append("anthropic")
        return services

    def has_ai_service(self) -> bool:
        return len(self.available_ai_services()) > 0

    def interview_duration(self) -> int:
        """Interview length in seconds for the current environment."""
        if self.is_production:
            return self.INTERVIEW_DURATION_PROD
        return self.INTERVIEW_DURATION_DEV

    def missing_required_env(self) -> List[str]:
        missing = [
            name
            for name in ("DATABASE_URL", "NEXTAUTH_URL", "NEXTAUTH_SECRET")
            if not getattr(self, name)
        ]
        if not self.has_ai_service():
            missing.append("DEEPSEEK_API_KEY|OPENAI_API_KEY|ANTHROPIC_API_KEY")
        return missing


@lru_cache()
def get_settings() -> Settings:
    settings = Settings()
    if not settings.has_ai_service():
        logging.getLogger("codemocklab").warning(
            "No AI service configured. Set DEEPSEEK_API_KEY, OPENAI_API_KEY "
            "or ANTHROPIC_API_KEY to enable AI features."
        )
    return settings
