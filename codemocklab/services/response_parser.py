"""
Recovery of JSON objects from raw LLM replies.

Replies are expected to be JSON but regularly arrive wrapped in markdown
fences, surrounded by prose or truncated mid-object when the model hits its
token limit. ``parse_llm_json`` runs a fixed sequence of repairs and returns
``None`` when nothing usable can be recovered; callers treat ``None`` as
"fallback required" and never as a fatal error.
"""

import json
import re
from typing import Any, Dict, List, Optional

from ..core.logger import get_logger

logger = get_logger(__name__)

FENCE_JSON = re.compile(r"```json\n?")
FENCE = re.compile(r"```\n?")
GREEDY_OBJECT = re.compile(r"\{[\s\S]*\}")

CLOSERS = {"{": "}", "[": "]"}


def strip_code_fences(text: str) -> str:
    return FENCE.sub("", FENCE_JSON.sub("", text or "")).strip()


def _loads_object(candidate: str) -> Optional[Dict[str, Any]]:
    try:
        parsed = json.loads(candidate)
    except (json.JSONDecodeError, TypeError, ValueError):
        return None
    return parsed if isinstance(parsed, dict) else None


def _repair_truncation(candidate: str) -> str:
    """Trim to the last complete element and close the object."""
    stripped = candidate.rstrip()
    last_boundary = max(stripped.rfind(","), stripped.rfind("}"))
    if last_boundary > 0:
        trimmed = stripped[: last_boundary + 1].rstrip()
        if trimmed.endswith(","):
            trimmed = trimmed[:-1]
        return trimmed + "}"

    last_quote = stripped.rfind('"')
    if last_quote > 0:
        return stripped[:last_quote] + "}"
    return stripped + "}"


def _close_structure(candidate: str) -> Optional[str]:
    """
    Cut the candidate after its last complete element and append the closers
    for every bracket still open at that point. String contents are skipped
    so braces and commas inside values don't count.
    """
    stack: List[str] = []
    in_string = False
    escaped = False
    cut_at = None
    stack_at_cut: List[str] = []

    for index, char in enumerate(candidate):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char in CLOSERS:
            stack.append(char)
        elif char in ("}", "]"):
            if stack:
                stack.pop()
            if stack:
                cut_at, stack_at_cut = index + 1, list(stack)
        elif char == ",":
            cut_at, stack_at_cut = index, list(stack)

    if cut_at is None or not stack_at_cut:
        return None

    body = candidate[:cut_at].rstrip()
    if body.endswith(","):
        body = body[:-1]
    return body + "".join(CLOSERS[opener] for opener in reversed(stack_at_cut))


def post_process(parsed: Dict[str, Any]) -> Dict[str, Any]:
    tech_stack = parsed.get("techStack")
    if isinstance(tech_stack, list) and any(
        isinstance(item, dict) and "dominanceScore" in item for item in tech_stack
    ):
        parsed["techStack"] = sorted(
            tech_stack,
            key=lambda item: _as_number(item.get("dominanceScore"))
            if isinstance(item, dict)
            else float("-inf"),
            reverse=True,
        )

    role_matching = parsed.get("roleMatchingAnalysis")
    if isinstance(role_matching, list):
        parsed["roleMatchingAnalysis"] = {
            item["role"]: item.get("matchScore")
            for item in role_matching
            if isinstance(item, dict) and item.get("role")
        }
    return parsed


def _as_number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return float("-inf")


def parse_llm_json(raw: str) -> Optional[Dict[str, Any]]:
    """Recover a JSON object from an LLM reply, or return None."""
    cleaned = strip_code_fences(raw)
    if not cleaned:
        return None

    if cleaned.startswith("{") and cleaned.endswith("}"):
        parsed = _loads_object(cleaned)
        if parsed is not None:
            return post_process(parsed)

    match = GREEDY_OBJECT.search(cleaned)
    if match:
        candidate = match.group(0)
    else:
        start = cleaned.find("{")
        if start == -1:
            logger.warning(f"No JSON object in LLM reply: {cleaned[:200]}")
            return None
        candidate = cleaned[start:]

    parsed = _loads_object(candidate) if candidate.endswith("}") else None
    if parsed is None:
        repaired = _repair_truncation(candidate)
        parsed = _loads_object(repaired)
        if parsed is None:
            closed = _close_structure(candidate)
            parsed = _loads_object(closed) if closed else None
        if parsed is not None:
            logger.info("Recovered truncated JSON from LLM reply")

    if parsed is None:
        logger.warning(f"Unable to recover JSON from LLM reply: {cleaned[:200]}")
        return None
    return post_process(parsed)


def is_valid_analysis(parsed: Optional[Dict[str, Any]]) -> bool:
    """Résumé analysis must at least carry a techStack list."""
    return isinstance(parsed, dict) and isinstance(parsed.get("techStack"), list)
