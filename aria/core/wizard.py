"""
Assessment wizard step order.

The wizard is a fixed, ordered list of routes; moving forward or back is an
index step on that list.
"""
from typing import Dict, List, NamedTuple, Optional


class WizardStep(NamedTuple):
    key: str
    route: str
    title: str


ASSESSMENT_STEPS: List[WizardStep] = [
    WizardStep("new", "/assessment/new", "New Assessment"),
    WizardStep("setup", "/assessment/setup", "Setup"),
    WizardStep("client_info", "/assessment/client-info", "Client Information"),
    WizardStep("background", "/assessment/background-history", "Background & History"),
    WizardStep("documents", "/assessment/documents-reviewed", "Documents Reviewed"),
    WizardStep("evaluation", "/assessment/evaluation", "Evaluation"),
    WizardStep("domains", "/assessment/domains", "Domains"),
    WizardStep("abc", "/assessment/abc-observation", "ABC Observation"),
    WizardStep("risk", "/assessment/risk-assessment", "Risk Assessment"),
    WizardStep("caregiver", "/assessment/caregiver-training", "Caregiver Training"),
    WizardStep("interventions", "/assessment/interventions", "Interventions"),
    WizardStep("teaching", "/assessment/teaching-protocols", "Teaching Protocols"),
    WizardStep("goals", "/assessment/goals", "Goals"),
    WizardStep("service_plan", "/assessment/service-plan", "Service Plan"),
    WizardStep("generalization", "/assessment/generalization", "Generalization"),
    WizardStep("coordination", "/assessment/coordination-care", "Coordination of Care"),
    WizardStep("signatures", "/assessment/signatures", "Signatures"),
    WizardStep("cpt", "/assessment/cpt-authorization", "CPT Authorization"),
    WizardStep("medical", "/assessment/medical-necessity", "Medical Necessity"),
    WizardStep("report", "/assessment/generate-report", "Generate Report"),
]

_ROUTES = [step.route for step in ASSESSMENT_STEPS]


def step_index(route: str) -> int:
    """Position of ``route`` in the wizard, or -1 when it is not a step."""
    try:
        return _ROUTES.index(route.rstrip("/") or route)
    except ValueError:
        return -1


def get_next_route(route: str) -> Optional[str]:
    idx = step_index(route)
    if 0 <= idx < len(_ROUTES) - 1:
        return _ROUTES[idx + 1]
    return None


def get_previous_route(route: str) -> Optional[str]:
    idx = step_index(route)
    if idx > 0:
        return _ROUTES[idx - 1]
    return None


def navigation(route: str) -> Optional[Dict]:
    idx = step_index(route)
    if idx == -1:
        return None
    total = len(_ROUTES)
    return {
        "current": _ROUTES[idx],
        "index": idx,
        "total": total,
        "previous": get_previous_route(route),
        "next": get_next_route(route),
        "progress": round((idx + 1) / total * 100),
    }
