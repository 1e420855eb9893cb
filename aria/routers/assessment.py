from fastapi import APIRouter, HTTPException, Query
from typing import List

from aria.core.wizard import ASSESSMENT_STEPS, navigation
from aria.schemas.generation import (
    CptCodeResponse,
    GoalStructureRequest,
    GoalStructureResponse,
    GoalValidationRequest,
    GoalValidationResponse,
    RecommendedHoursResponse,
)
from aria.services.goal_validation import (
    calculate_recommended_hours,
    suggest_goal_improvements,
    validate_cpt_code,
    validate_goal_structure,
    validate_smart_goal,
)

router = APIRouter(prefix="/assessment", tags=["assessment"])


@router.get("/steps")
def list_steps() -> List[dict]:
    return [
        {"index": i, "key": step.key, "route": step.route, "title": step.title}
        for i, step in enumerate(ASSESSMENT_STEPS)
    ]


@router.get("/steps/navigation")
def step_navigation(current: str = Query(..., description="Current wizard route")):
    nav = navigation(current)
    if nav is None:
        raise HTTPException(status_code=404, detail=f"Unknown wizard step: {current}")
    return nav


@router.post("/validate-goal", response_model=GoalValidationResponse)
def validate_goal(request: GoalValidationRequest):
    result = validate_smart_goal(request.goal)
    result["suggestions"] = suggest_goal_improvements(request.goal)
    return result


@router.post("/validate-goal-structure", response_model=GoalStructureResponse)
def validate_goal_parts(request: GoalStructureRequest):
    """Behavior, condition, criterion and timeline checked separately."""
    return validate_goal_structure(request.behavior, request.condition, request.criterion, request.timeline)


@router.get("/cpt-codes/{code}", response_model=CptCodeResponse)
def check_cpt_code(code: str):
    return {"code": code, "isValid": validate_cpt_code(code)}


@router.get("/recommended-hours", response_model=RecommendedHoursResponse)
def recommended_hours(
    severity: str = Query(..., description="mild, moderate or severe"),
    age: int = Query(..., ge=0, description="Client age in years"),
):
    return {"severity": severity, "age": age, **calculate_recommended_hours(severity, age)}
