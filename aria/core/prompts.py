"""
Centralized AI Prompt Repository
- Ensures consistency across report sections
- Decouples prompts from request handling
"""

import json
from typing import Any, Callable, Dict, List

# --- INSURANCE KNOWLEDGE BASE ---
INSURANCE_KNOWLEDGE_BASE: Dict[str, Dict[str, Any]] = {
    "aetna": {
        "requirements": [
            "VB-MAPP or ABLLS-R assessment required",
            "Functional Behavior Assessment (FBA) for problem behaviors",
            "Parent training goals mandatory",
            "Discharge criteria must be clearly defined",
            "Baseline data required for all goals",
        ],
        "preferred_language": "Medical necessity must be clearly demonstrated with standardized assessment scores and functional impairment documentation.",
    },
    "bcbs": {
        "requirements": [
            "Standardized assessment (VB-MAPP, ABLLS-R, or PEAK)",
            "Adaptive behavior assessment (Vineland-3)",
            "Parent/caregiver training component required",
            "Measurable treatment goals with baseline data",
            "Discharge planning and criteria",
        ],
        "preferred_language": "Treatment must address core deficits in social communication, adaptive behavior, and functional skills with evidence-based interventions.",
    },
    "uhc": {
        "requirements": [
            "Comprehensive developmental assessment required",
            "Functional analysis for challenging behaviors",
            "Family training is essential component",
            "Clear clinical justification for recommended hours",
        ],
        "preferred_language": "Services must be individualized, evidence-based, and demonstrate clear medical necessity based on functional impairments.",
    },
    "medicaid": {
        "requirements": [
            "Comprehensive diagnostic and functional assessment",
            "Goals must address daily living skills",
            "Parent/guardian participation required",
            "Cultural considerations documented",
        ],
        "preferred_language": "Treatment must focus on functional skills that enable participation in home, school, and community settings.",
    },
    "tricare": {
        "requirements": [
            "Medical necessity clearly documented",
            "Standardized assessment tools required",
            "Parent training component mandatory",
            "Coordination with other providers documented",
        ],
        "preferred_language": "Treatment must be medically necessary, evidence-based, and designed to restore or improve functional capabilities.",
    },
}

# --- REPORT WRITING ---
ARIA_SYSTEM = """You are ARIA, an expert ABA Assessment Writing Assistant with deep expertise in:
- Insurance requirements for all major payers (Aetna, BCBS, UHC, Medicaid, TRICARE)
- Standardized assessment tools (VB-MAPP, ABLLS-R, PEAK, Vineland-3, AFLS)
- Clinical documentation standards and medical necessity justification
- BACB ethical guidelines and professional standards

Write in a professional, clinical, evidence-based register. Be specific and measurable.
Always use person-first language. Every goal must be SMART and include baseline data."""


def _lines(items: Any, fallback: str = "- Not provided") -> str:
    if not items:
        return fallback
    return "\n".join(f"- {item}" for item in items)


def _scores(scores: Any) -> str:
    if not scores:
        return "- Not provided"
    return "\n".join(
        f"- {s.get('domain', 'Domain')}: {s.get('score', 'n/a')} ({s.get('severity', 'unspecified')})"
        for s in scores if isinstance(s, dict)
    ) or "- Not provided"


def medical_necessity_prompt(data: Dict[str, Any]) -> str:
    insurance = str(data.get("insurance", ""))
    reqs = INSURANCE_KNOWLEDGE_BASE.get(insurance.lower(), {})
    return f"""Write a comprehensive medical necessity statement for ABA services authorization.

CLIENT INFORMATION:
- Name: {data.get('clientName', 'the client')}
- Age: {data.get('age', 'unknown')} years old
- Diagnosis: {data.get('diagnosis', 'not provided')}
- Insurance: {insurance or 'not provided'}

ASSESSMENT SCORES:
{_scores(data.get('impairmentScores'))}

REQUESTED HOURS: {data.get('hoursRequested', 'unspecified')} hours per week

INSURANCE REQUIREMENTS FOR {insurance.upper() or 'THIS PAYER'}:
{_lines(reqs.get('requirements'), '- Standard ABA requirements')}

INSTRUCTIONS:
1. Start with a clear statement of functional impairment
2. Reference specific assessment scores and their clinical significance
3. Explain how the impairments impact daily living (home, school, community)
4. Justify the intensity of services and why less intensive services would be insufficient
5. Include parent training necessity and end with clear treatment objectives

Use {reqs.get('preferred_language', 'professional clinical language')} when describing medical necessity.
Keep the statement between 300-500 words."""


def smart_goal_prompt(data: Dict[str, Any]) -> str:
    return f"""Create a SMART goal for an ABA treatment plan.

TARGET INFORMATION:
- Domain: {data.get('domain', 'not provided')}
- Current Level: {data.get('currentLevel', 'not provided')}
- Target Skill: {data.get('targetSkill', 'not provided')}
- Client Age: {data.get('clientAge', 'unknown')} years old

Include baseline data, the measurement method, setting/conditions and a timeline.

FORMAT:
[Client name] will [specific, measurable behavior] at [criterion] in [setting/conditions] as measured by [measurement method] by [timeline].

Generate ONE well-crafted SMART goal following this format."""


def hours_justification_prompt(data: Dict[str, Any]) -> str:
    scores = data.get("impairmentScores") or []
    severe = sum(
        1 for s in scores if isinstance(s, dict) and s.get("severity") in ("severe", "moderate")
    )
    concerns = data.get("behavioralConcerns") or []
    age = data.get("clientAge")
    try:
        early = age is not None and float(age) < 5
    except (TypeError, ValueError):
        early = False
    return f"""Recommend appropriate ABA service hours and provide clinical justification.

ASSESSMENT DATA:
{_scores(scores)}

BEHAVIORAL CONCERNS:
{_lines(concerns, '- No significant behavioral concerns reported')}

CLIENT AGE: {age if age is not None else 'unknown'} years old

ANALYSIS FACTORS:
- Number of severe/moderate impairments: {severe}
- Behavioral concerns present: {'Yes' if concerns else 'No'}
- Age considerations: {'Early intervention critical period' if early else 'School-age considerations'}

PROVIDE:
1. Recommended hours per week (comprehensive or focused)
2. Clinical rationale based on severity and needs
3. Breakdown by service type (1:1 direct, parent training, supervision)
4. Duration of initial authorization period

Consider typical maximums: comprehensive 30-40 hours/week, focused 20-25 hours/week."""


def parent_training_prompt(data: Dict[str, Any]) -> str:
    return f"""Create comprehensive parent/caregiver training goals.

CLIENT AGE: {data.get('clientAge', 'unknown')} years old

PRIMARY CONCERNS:
{_lines(data.get('primaryConcerns'))}

PARENT GOALS TO ADDRESS:
{_lines(data.get('parentGoals'))}

Generate 3-5 SMART parent training goals measured by implementation fidelity (e.g. "with 80% fidelity"),
then recommend frequency, duration and format (in-person, telehealth or hybrid)."""


def fba_prompt(data: Dict[str, Any]) -> str:
    return f"""Write a Functional Behavior Assessment (FBA) summary.

TARGET BEHAVIOR: {data.get('behavior', 'not provided')}
FREQUENCY: {data.get('frequency', 'not provided')}

ANTECEDENTS:
{_lines(data.get('antecedents'))}

CONSEQUENCES:
{_lines(data.get('consequences'))}

HYPOTHESIZED FUNCTION: {data.get('hypothesizedFunction', 'not provided')}

Include: operational definition, baseline data, ABC analysis, functional hypothesis,
replacement behaviors, intervention strategies and data collection method."""


def reason_for_referral_prompt(data: Dict[str, Any]) -> str:
    return f"""Write the "Reason for Referral" section of an ABA assessment report.

CLIENT: {data.get('clientName', 'the client')}, {data.get('age', 'unknown')} years old
DIAGNOSIS: {data.get('diagnosis', 'not provided')}
REFERRAL SOURCE: {data.get('referralSource', 'not provided')}

PRESENTING CONCERNS:
{_lines(data.get('concerns'))}

Write 1-2 concise clinical paragraphs explaining who referred the client, why, and
which skill deficits and behaviors the assessment will address."""


PROMPT_TEMPLATES: Dict[str, Callable[[Dict[str, Any]], str]] = {
    "medicalNecessity": medical_necessity_prompt,
    "smartGoal": smart_goal_prompt,
    "hoursJustification": hours_justification_prompt,
    "parentTrainingGoals": parent_training_prompt,
    "functionalBehaviorAssessment": fba_prompt,
    "reasonForReferral": reason_for_referral_prompt,
}

# --- GOAL TARGET DATE ---
TARGET_DATE_TEMPLATE = """You are an expert BCBA estimating a realistic target date for an ABA therapy goal.

TODAY'S DATE: {today}

GOAL INFORMATION:
- Title: {goal_title}
- Description: {goal_description}
- Domain: {domain}
- Measurement Type: {measurement_type}
- Target: {target_percentage}%
- Age Range: {age_range}
- Current Baseline: {baseline}

Typical progress rates: simple skills 1-3 months, skill acquisition 3-6 months,
behavior reduction 4-8 months, complex skills 6-12 months.

Return ONLY a JSON object:
{{"targetDate": "YYYY-MM-DD", "estimatedWeeks": number, "reasoning": "Brief explanation (1 sentence)"}}"""

DEFAULT_TARGET_DATE_REASONING = "Default estimate of 6 months based on typical ABA progress rates"

# --- BEHAVIOR SUGGESTIONS ---
BEHAVIOR_SUGGESTION_TEMPLATE = """You are an expert BCBA analyzing assessment data to identify likely problem behaviors.

CLIENT ASSESSMENT DATA:
- Deficits: {deficits}
- Domain Scores: {domain_scores}

AVAILABLE BEHAVIOR TEMPLATES:
{available}

Identify 3-5 problem behaviors MOST LIKELY to be present. Only suggest behaviors from the
available templates, matching the name exactly.

Return ONLY a JSON array:
[{{"name": "...", "risk": "high|medium|low", "reason": "one sentence", "function": "escape|attention|tangible|sensory"}}]"""

# --- COMPLIANCE CHAT ---
COMPLIANCE_SYSTEM = """You are ARIA, a compliance assistant for ABA professionals.

STRICT FORMAT RULES:
1. Answer in at most 3-4 sentences
2. Use bullet points only if necessary (maximum 3)
3. Be direct and practical; offer to go deeper if the topic is complex

AREAS OF EXPERTISE: HIPAA and data privacy, insurance requirements (BCBS, Aetna, UHC,
Cigna, Medicaid), the BACB Ethics Code, ABA clinical documentation.

If it helps, end with ONE useful follow-up question."""

COMPLIANCE_CONTEXT_TEMPLATE = (
    "Reference material from the knowledge base:\n\n{context}\n\n"
    "Use it when relevant; if it does not answer the question, rely on your expertise."
)


def as_json(value: Any) -> str:
    return json.dumps(value, default=str) if value is not None else "Not provided"


def behavior_list(names: List[str]) -> str:
    return ", ".join(names)
