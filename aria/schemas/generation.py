from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class GenerateContentRequest(BaseModel):
    type: Optional[str] = None
    data: Optional[Dict[str, Any]] = None


class GenerateContentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    content: str
    type: str
    generated_at: str = Field(alias="generatedAt")


class TargetDateRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    goal_title: Optional[str] = None
    goal_description: Optional[str] = None
    domain: Optional[str] = None
    measurement_type: Optional[str] = None
    target_percentage: Optional[float] = None
    age_range: Optional[str] = None
    baseline_data: Optional[Any] = None


class TargetDateResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    target_date: str
    estimated_weeks: Optional[float] = None
    reasoning: str


class BehaviorSuggestionRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    deficits: Optional[Any] = None
    domain_scores: Optional[Any] = None
    available_behaviors: List[str] = Field(default_factory=list)


class BehaviorSuggestion(BaseModel):
    name: str
    risk: str
    reason: str
    function: str


class BehaviorSuggestionResponse(BaseModel):
    suggestions: List[BehaviorSuggestion]


class ComplianceChatRequest(BaseModel):
    messages: Optional[Any] = None
    category: Optional[str] = None


class ComplianceSource(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    document_id: str
    document_title: str
    similarity: float


class ComplianceChatResponse(BaseModel):
    success: bool
    content: str
    sources: List[ComplianceSource] = Field(default_factory=list)


class GoalValidationRequest(BaseModel):
    goal: str = ""


class GoalValidationResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_valid: bool
    issues: List[str]
    score: int
    suggestions: List[str]


class GoalStructureRequest(BaseModel):
    behavior: Optional[str] = None
    condition: Optional[str] = None
    criterion: Optional[str] = None
    timeline: Optional[str] = None


class GoalStructureResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_valid: bool
    errors: List[str]
    warnings: List[str]


class CptCodeResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    code: str
    is_valid: bool


class RecommendedHoursResponse(BaseModel):
    severity: str
    age: int
    min: int
    max: int
