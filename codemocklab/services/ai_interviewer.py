from typing import Dict, List, Optional, Tuple

from ..core.config import Settings
from ..core.logger import get_logger
from ..utils.exceptions import AIServiceUnavailableError, LLMError
from . import fallback_analyzer, prompt_builder
from .response_parser import is_valid_analysis, parse_llm_json

logger = get_logger(__name__)


class InterviewAI:
    """LLM-backed interview operations built on top of an LLM client.

    ``client`` is anything with ``complete(prompt, temperature, max_tokens,
    timeout)``; it may be None when no provider is configured, in which case
    résumé analysis degrades to the keyword analyzer and every other
    operation raises ``AIServiceUnavailableError``.
    """

    def __init__(self, client, settings: Settings):
        self.client = client
        self.settings = settings

    def _require_client(self):
        if self.client is None:
            raise AIServiceUnavailableError("AI服务未配置")
        return self.client

    def analyze_resume(self, content: str) -> Tuple[Dict, str]:
        """Return (analysis, source) where source is "ai" or "fallback"."""
        if self.client is None:
            logger.warning("No LLM client configured, using fallback analysis")
            return fallback_analyzer.analyze(content), "fallback"

        try:
            reply = self.client.complete(
                prompt_builder.build_resume_analysis_prompt(content),
                temperature=0.3,
                max_tokens=4000,
                timeout=self.settings.RESUME_ANALYSIS_TIMEOUT_SECONDS,
            )
        except LLMError as e:
            logger.error(f"AI resume analysis failed, using fallback: {str(e)}")
            return fallback_analyzer.analyze(content), "fallback"

        parsed = parse_llm_json(reply)
        if not is_valid_analysis(parsed):
            logger.warning("AI reply is not a valid analysis, using fallback")
            return fallback_analyzer.analyze(content), "fallback"
        return parsed, "ai"

    def generate_questions(
        self,
        resume_profile: Dict,
        job_data: Dict,
        ai_profile: Optional[Dict] = None,
        count: int = 5,
    ) -> List[Dict]:
        client = self._require_client()
        prompt = prompt_builder.build_question_generation_prompt(
            resume_profile, job_data, ai_profile, count
        )
        try:
            reply = client.complete(prompt)
        except LLMError as e:
            logger.error(f"Question generation failed: {str(e)}")
            raise AIServiceUnavailableError("AI服务不可用，无法生成面试问题")

        parsed = parse_llm_json(reply)
        questions = parsed.get("questions") if parsed else None
        if not isinstance(questions, list) or not questions:
            logger.error(f"Failed to parse generated questions: {reply[:300]}")
            raise AIServiceUnavailableError("AI服务不可用，无法生成面试问题")

        valid = [
            q for q in questions if isinstance(q, dict) and str(q.get("content") or "").strip()
        ]
        logger.info(f"Generated {len(valid)} questions (requested {count})")
        return valid[:count]

    def evaluate_answer(
        self,
        question: str,
        answer: str,
        question_type: str,
        expected_keywords: Optional[List[str]] = None,
    ) -> Dict:
        client = self._require_client()
        prompt = prompt_builder.build_evaluation_prompt(
            question, answer, question_type, expected_keywords
        )
        try:
            reply = client.complete(prompt)
        except LLMError as e:
            logger.error(f"Answer evaluation failed: {str(e)}")
            raise AIServiceUnavailableError("AI评估服务不可用")

        parsed = parse_llm_json(reply)
        if not parsed or parsed.get("score") is None:
            raise AIServiceUnavailableError("AI评估服务不可用")

        try:
            score = float(parsed["score"])
        except (TypeError, ValueError):
            raise AIServiceUnavailableError("AI评估服务不可用")

        parsed["score"] = max(0.0, min(100.0, score))
        for key in ("strengths", "improvements", "suggestions"):
            if not isinstance(parsed.get(key), list):
                parsed[key] = []
        parsed["feedback"] = str(parsed.get("feedback") or "")
        return parsed

    def generate_follow_up(self, question: str, answer: str) -> str:
        client = self._require_client()
        reply = client.complete(
            prompt_builder.build_follow_up_prompt(question, answer),
            temperature=0.7,
            max_tokens=100,
        )
        return reply.strip()

    def generate_best_answer(
        self,
        question: str,
        question_type: str,
        difficulty: str,
        topics: Optional[List[str]] = None,
    ) -> str:
        client = self._require_client()
        reply = client.complete(
            prompt_builder.build_best_answer_prompt(
                question, question_type, difficulty, topics
            ),
            temperature=0.3,
            max_tokens=1500,
        )
        answer = reply.strip()
        if not answer:
            raise LLMError("Empty best answer")
        return answer

    def generate_report(self, interview: Dict, questions: List[Dict]) -> Dict:
        client = self._require_client()
        reply = client.complete(prompt_builder.build_report_prompt(interview, questions))
        parsed = parse_llm_json(reply)
        if not parsed or parsed.get("overallScore") is None:
            raise AIServiceUnavailableError("AI报告生成服务不可用")
        return parsed

    def compare_answers(
        self, question: str, current_answer: str, candidate_answer: str
    ) -> Optional[Dict]:
        """LLM verdict on which answer is better, or None when unusable."""
        client = self._require_client()
        try:
            reply = client.complete(
                prompt_builder.build_answer_comparison_prompt(
                    question, current_answer, candidate_answer
                ),
                temperature=0.3,
                max_tokens=800,
            )
        except LLMError as e:
            logger.warning(f"Answer comparison failed: {str(e)}")
            return None

        parsed = parse_llm_json(reply)
        if not parsed or not parsed.get("betterAnswer"):
            return None
        return parsed
