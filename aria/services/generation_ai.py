"""
Narrative drafting and assist features for the assessment wizard.

Assist features (target dates, behavior suggestions) degrade to defaults when
the model fails. Report content generation surfaces the failure.
"""
import calendar
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from aria.core import prompts
from aria.core.exceptions import AppException, ValidationError
from aria.services.ai_orchestrator import AIDomain, AIOrchestrator

logger = logging.getLogger(__name__)

VALID_CONTENT_TYPES = list(prompts.PROMPT_TEMPLATES.keys())
BEHAVIOR_RISKS = {"high", "medium", "low"}


def generate_content(content_type: Optional[str], data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not content_type or not data:
        raise ValidationError("Missing required fields: type and data")
    if content_type not in prompts.PROMPT_TEMPLATES:
        raise ValidationError(f"Invalid type. Must be one of: {', '.join(VALID_CONTENT_TYPES)}")

    user_prompt = prompts.PROMPT_TEMPLATES[content_type](data)
    content = AIOrchestrator.generate_text(
        user_prompt,
        system=prompts.ARIA_SYSTEM,
        domain=AIDomain.CONTENT
    )
    return {
        "success": True,
        "content": content,
        "type": content_type,
        "generatedAt": datetime.now(timezone.utc).isoformat(),
    }


def add_months(start: date, months: int) -> date:
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def default_target_date(today: Optional[date] = None) -> Dict[str, Any]:
    today = today or date.today()
    return {
        "targetDate": add_months(today, 6).isoformat(),
        "reasoning": prompts.DEFAULT_TARGET_DATE_REASONING,
    }


def suggest_target_date(goal: Dict[str, Any], today: Optional[date] = None) -> Dict[str, Any]:
    """Estimate a goal target date; any failure yields today + 6 months."""
    today = today or date.today()

    def field(name: str) -> Any:
        value = goal.get(name)
        return "Not provided" if value is None or value == "" else value

    user_prompt = prompts.TARGET_DATE_TEMPLATE.format(
        today=today.isoformat(),
        goal_title=field("goalTitle"),
        goal_description=field("goalDescription"),
        domain=field("domain"),
        measurement_type=field("measurementType"),
        target_percentage=field("targetPercentage"),
        age_range=field("ageRange"),
        baseline=prompts.as_json(goal.get("baselineData")),
    )
    try:
        result = AIOrchestrator.analyze_json(
            user_prompt, expect="object", max_tokens=512, domain=AIDomain.GOALS
        )
        target = date.fromisoformat(str(result["targetDate"]))
    except (AppException, KeyError, TypeError, ValueError) as e:
        logger.warning(f"Target date suggestion failed, using default: {e}")
        return default_target_date(today)

    if target <= today:
        logger.warning(f"Model suggested a past target date ({target}); using default")
        return default_target_date(today)

    suggestion = {
        "targetDate": target.isoformat(),
        "reasoning": str(result.get("reasoning") or prompts.DEFAULT_TARGET_DATE_REASONING),
    }
    weeks = result.get("estimatedWeeks")
    if isinstance(weeks, (int, float)) and not isinstance(weeks, bool):
        suggestion["estimatedWeeks"] = weeks
    return suggestion


def suggest_behaviors(
    deficits: Any,
    domain_scores: Any,
    available_behaviors: List[str],
) -> List[Dict[str, Any]]:
    """Likely problem behaviors drawn from the caller's template list; [] on failure."""
    if not available_behaviors:
        return []

    user_prompt = prompts.BEHAVIOR_SUGGESTION_TEMPLATE.format(
        deficits=prompts.as_json(deficits),
        domain_scores=prompts.as_json(domain_scores),
        available=prompts.behavior_list(available_behaviors),
    )
    try:
        raw = AIOrchestrator.analyze_json(
            user_prompt, expect="array", max_tokens=1024, domain=AIDomain.BEHAVIORS
        )
    except AppException as e:
        logger.warning(f"Behavior suggestion failed, returning none: {e.message}")
        return []

    allowed = set(available_behaviors)
    suggestions = []
    for item in raw if isinstance(raw, list) else []:
        if not isinstance(item, dict) or item.get("name") not in allowed:
            continue
        risk = str(item.get("risk", "medium")).lower()
        suggestions.append({
            "name": item["name"],
            "risk": risk if risk in BEHAVIOR_RISKS else "medium",
            "reason": str(item.get("reason", "")),
            "function": str(item.get("function", "")),
        })
    return suggestions
