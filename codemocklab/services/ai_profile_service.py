from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.logger import get_logger
from ..models.ai_profile import AIProfile, ProjectAnalysis, TechStackItem
from ..models.resume import Resume

logger = get_logger(__name__)

VALID_EXPERIENCE_LEVELS = ("junior", "mid", "senior", "lead")


def _as_list(value: Any) -> List:
    return value if isinstance(value, list) else []


def _as_dict(value: Any) -> Dict:
    return value if isinstance(value, dict) else {}


def _as_int(value: Any, default: int = 0, low: int = 0, high: Optional[int] = None) -> int:
    try:
        number = int(round(float(value)))
    except (TypeError, ValueError):
        return default
    number = max(low, number)
    return min(high, number) if high is not None else number


def _experience(analysis: Dict) -> Dict:
    experience = analysis.get("experienceLevel")
    if isinstance(experience, str):
        experience = {"level": experience}
    experience = _as_dict(experience)

    level = str(experience.get("level") or "mid").lower()
    if level not in VALID_EXPERIENCE_LEVELS:
        level = "mid"
    try:
        confidence = float(experience.get("confidence", 0.7))
    except (TypeError, ValueError):
        confidence = 0.7
    return {
        "level": level,
        "confidence": max(0.0, min(1.0, confidence)),
        "reasoning": experience.get("reasoning"),
    }


def _simulated_interview(value: Any) -> Optional[Dict]:
    """Stored bank with lone-string categories wrapped into one-item lists."""
    if not isinstance(value, dict) or not value:
        return None
    normalized = {}
    for key, questions in value.items():
        if isinstance(questions, str):
            questions = [questions]
        elif isinstance(questions, dict):
            questions = {
                tech: [items] if isinstance(items, str) else items
                for tech, items in questions.items()
            }
        normalized[key] = questions
    return normalized


class AIProfileService:
    @staticmethod
    def upsert_profile(
        db: Session,
        resume: Resume,
        analysis: Dict,
        source: str,
        metadata: Optional[Dict] = None,
    ) -> AIProfile:
        """
        Create or replace the AI profile of a résumé.

        Tech stack and project rows are replaced wholesale, never merged. The
        whole replacement is committed as one transaction.
        """
        try:
            profile = resume.ai_profile
            if profile is None:
                profile = AIProfile(resume=resume)
                db.add(profile)

            experience = _experience(analysis)
            profile.experience_level = experience["level"]
            profile.experience_level_confidence = experience["confidence"]
            profile.experience_reasoning = experience["reasoning"]
            profile.specializations = _as_list(analysis.get("specializations"))
            profile.tech_highlights = _as_list(analysis.get("techHighlights"))
            profile.career_suggestions = _as_list(analysis.get("careerSuggestions"))
            profile.role_matching_analysis = _as_dict(analysis.get("roleMatchingAnalysis"))
            profile.skill_assessment = _as_dict(analysis.get("skillAssessment"))
            profile.simulated_interview = _simulated_interview(
                analysis.get("simulatedInterview")
            )
            profile.analysis_source = source
            profile.raw_analysis = {
                "analysis": analysis,
                "metadata": metadata or {},
                "analyzedAt": datetime.now(timezone.utc).isoformat(),
            }

            # delete-orphan cascade removes the previous rows on flush
            profile.tech_stack = [
                TechStackItem(
                    technology=str(tech["technology"]),
                    category=tech.get("category"),
                    proficiency=tech.get("proficiency"),
                    value_score=_as_int(tech.get("valueScore"), high=100),
                    evidence_count=_as_int(tech.get("evidenceCount")),
                    last_used=None if tech.get("lastUsed") is None else str(tech["lastUsed"]),
                )
                for tech in _as_list(analysis.get("techStack"))
                if isinstance(tech, dict) and tech.get("technology")
            ]
            profile.project_analysis = [
                ProjectAnalysis(
                    project_name=project.get("projectName"),
                    description=project.get("description"),
                    tech_stack=_as_list(project.get("techStack")),
                    complexity=project.get("complexity"),
                    impact=project.get("impact"),
                    role=project.get("role"),
                    highlights=_as_list(project.get("highlights")),
                    interview_questions=_as_list(project.get("interviewQuestions")),
                )
                for project in _as_list(analysis.get("projectAnalysis"))
                if isinstance(project, dict)
            ]

            db.commit()
            db.refresh(profile)
            logger.info(
                f"Saved AI profile for resume {resume.id} "
                f"({source}, {len(profile.tech_stack)} technologies)"
            )
            return profile
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def get_profile(db: Session, resume_id: int) -> Optional[AIProfile]:
        return db.query(AIProfile).filter(AIProfile.resume_id == resume_id).first()

    @staticmethod
    def serialize(profile: AIProfile) -> Dict:
        tech_stack = sorted(
            profile.tech_stack, key=lambda item: item.value_score or 0, reverse=True
        )
        simulated = profile.simulated_interview
        return {
            "id": profile.id,
            "resumeId": profile.resume_id,
            "experienceLevel": profile.experience_level,
            "experienceLevelConfidence": profile.experience_level_confidence,
            "experienceReasoning": profile.experience_reasoning,
            "specializations": profile.specializations or [],
            "techHighlights": profile.tech_highlights or [],
            "careerSuggestions": profile.career_suggestions or [],
            "roleMatchingAnalysis": profile.role_matching_analysis or {},
            "skillAssessment": profile.skill_assessment or {},
            "simulatedInterview": simulated,
            "analysisSource": profile.analysis_source,
            "techStack": [
                {
                    "technology": item.technology,
                    "category": item.category,
                    "proficiency": item.proficiency,
                    "valueScore": item.value_score,
                    "evidenceCount": item.evidence_count,
                    "lastUsed": item.last_used,
                }
                for item in tech_stack
            ],
            "projectAnalysis": [
                {
                    "projectName": project.project_name,
                    "description": project.description,
                    "techStack": project.tech_stack or [],
                    "complexity": project.complexity,
                    "impact": project.impact,
                    "role": project.role,
                    "highlights": project.highlights or [],
                    "interviewQuestions": project.interview_questions or [],
                }
                for project in profile.project_analysis
            ],
            "stats": profile_stats(tech_stack, simulated),
            "createdAt": profile.created_at.isoformat() if profile.created_at else None,
            "updatedAt": profile.updated_at.isoformat() if profile.updated_at else None,
        }


def profile_stats(tech_stack: List[TechStackItem], simulated: Optional[Dict]) -> Dict:
    scores = [item.value_score or 0 for item in tech_stack]
    categories: Dict[str, int] = {}
    for item in tech_stack:
        categories[item.category] = categories.get(item.category, 0) + 1
    top_categories = sorted(categories.items(), key=lambda pair: pair[1], reverse=True)

    return {
        "totalTechnologies": len(tech_stack),
        # 75 is shown for an empty stack
        "avgValueScore": round(sum(scores) / len(scores)) if scores else 75,
        "expertLevelCount": sum(1 for item in tech_stack if item.proficiency == "专家"),
        "highValueTechCount": sum(1 for score in scores if score >= 90),
        "topCategories": [
            {"category": category, "count": count}
            for category, count in top_categories[:3]
        ],
        "hasQuestionBank": bool(simulated),
        "questionBankSize": question_bank_size(simulated),
    }


def question_bank_size(simulated: Optional[Dict]) -> int:
    if not simulated:
        return 0
    total = 0
    for value in simulated.values():
        if isinstance(value, list):
            total += len(value)
        elif isinstance(value, dict):
            total += sum(len(v) for v in value.values() if isinstance(v, list))
    return total
