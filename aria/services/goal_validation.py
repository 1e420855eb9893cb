import re
from typing import Any, Dict, List, Optional

from aria.core.exceptions import ValidationError

EXAMPLE_GOAL = (
    '"John will independently request preferred items using 2-3 word phrases in 8/10 '
    "opportunities across natural environments as measured by direct observation and data "
    'collection within 6 months."'
)

_CHECKS = [
    (re.compile(r"(\d+/\d+|\d+%|\d+ out of \d+)", re.I), 25,
     'Missing measurable criteria (e.g., "8/10 trials", "80% accuracy")'),
    (re.compile(r"(within \d+ (months?|weeks?)|by [A-Z][a-z]+ \d+|in \d+ months?)", re.I), 20,
     'Missing timeline (e.g., "within 6 months", "by December 2026")'),
    (re.compile(r"\b(in|across|with|during|when|given)\b", re.I), 20,
     'Missing setting or conditions (e.g., "in natural environment", "with minimal prompting")'),
    (re.compile(r"(as measured by|measured through|assessed via|using|data collection)", re.I), 20,
     'Missing measurement method (e.g., "as measured by direct observation")'),
    (re.compile(r"\b(will|independently|spontaneously|correctly|appropriately)\b", re.I), 15,
     "Missing specific behavior description with action verbs"),
]


def validate_smart_goal(goal: str) -> Dict[str, Any]:
    """Score a goal 0-100 against SMART criteria; valid means no issues and >= 80."""
    goal = goal or ""
    issues: List[str] = []
    score = 0

    for pattern, points, issue in _CHECKS:
        if pattern.search(goal):
            score += points
        else:
            issues.append(issue)

    if re.search(r"\bwill\b", goal, re.I):
        score += 5

    if len(goal) < 50:
        issues.append("Goal is too brief - SMART goals should be detailed and specific")
        score -= 10

    score = max(0, min(100, score))
    return {"isValid": not issues and score >= 80, "issues": issues, "score": score}


def suggest_goal_improvements(goal: str) -> List[str]:
    validation = validate_smart_goal(goal)
    if validation["isValid"]:
        return []
    suggestions = [f"Current score: {validation['score']}/100"]
    suggestions.extend(f"• {issue}" for issue in validation["issues"])
    suggestions.append(f"Example of a well-formed SMART goal: {EXAMPLE_GOAL}")
    return suggestions


# ABA adaptive behavior assessment and treatment codes
VALID_CPT_CODES = ("97151", "97152", "97153", "97154", "97155", "97156", "97157", "97158")

# Weekly hour ranges by severity
BASE_WEEKLY_HOURS = {
    "mild": (10, 15),
    "moderate": (15, 25),
    "severe": (25, 40),
}
MAX_WEEKLY_HOURS = 40
EARLY_INTERVENTION_AGE = 5


def _blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


def validate_goal_structure(
    behavior: Optional[str],
    condition: Optional[str],
    criterion: Optional[str],
    timeline: Optional[str],
) -> Dict[str, Any]:
    """
    Check a goal written as separate parts.

    Errors make the goal invalid; warnings (a 100% criterion) do not.
    """
    errors: List[str] = []
    warnings: List[str] = []

    if _blank(behavior) or len(behavior.strip()) < 10:
        errors.append("Behavior must be specific and at least 10 characters")

    if _blank(criterion):
        errors.append("Criterion is required for measurability")
    elif not re.search(r"\d+", criterion):
        errors.append("Criterion must include measurable numbers (percentage, frequency, or count)")

    percent = re.search(r"(\d+)%", criterion or "")
    if percent:
        value = int(percent.group(1))
        if value > 100:
            errors.append("Percentage cannot exceed 100%")
        elif value == 100:
            warnings.append("100% criterion may be unrealistic - consider 80-90%")

    if _blank(condition) or len(condition.strip()) < 5:
        errors.append("Condition must describe when/where the behavior occurs")

    if _blank(timeline):
        errors.append("Timeline is required")

    return {"isValid": not errors, "errors": errors, "warnings": warnings}


def validate_cpt_code(code: Optional[str]) -> bool:
    return code in VALID_CPT_CODES


def calculate_recommended_hours(severity: str, age: int) -> Dict[str, int]:
    """Weekly therapy hours for a severity level; children under 5 get more."""
    if severity not in BASE_WEEKLY_HOURS:
        raise ValidationError(f"Unknown severity: {severity}. Expected one of: {', '.join(BASE_WEEKLY_HOURS)}")

    low, high = BASE_WEEKLY_HOURS[severity]
    if age < EARLY_INTERVENTION_AGE:
        low, high = low + 5, min(high + 10, MAX_WEEKLY_HOURS)
    return {"min": low, "max": high}
