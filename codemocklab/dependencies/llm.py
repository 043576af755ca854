from typing import Optional
from fastapi import Depends
from ..core.config import Settings, get_settings
from ..services.ai_interviewer import InterviewAI
from ..services.llm_client import DeepSeekClient


def get_llm_client(settings: Settings = Depends(get_settings)) -> Optional[DeepSeekClient]:
    """DeepSeek client, or None when no DeepSeek key is configured."""
    if not settings.DEEPSEEK_API_KEY:
        return None
    return DeepSeekClient(settings)


def get_interview_ai(
    client: Optional[DeepSeekClient] = Depends(get_llm_client),
    settings: Settings = Depends(get_settings),
) -> InterviewAI:
    return InterviewAI(client, settings)
