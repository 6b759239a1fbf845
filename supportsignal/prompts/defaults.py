"""Default prompt templates seeded into ai_prompts when missing."""

from typing import Any, Dict, List

from supportsignal.prompts.resolver import VariableDefinition

CLARIFICATION_PROMPT_NAME = "generate_clarification_questions"
ENHANCEMENT_PROMPT_NAME = "enhance_narrative"

CLARIFICATION_TEMPLATE = """You are an expert incident analyst helping to gather additional details about an NDIS incident involving {{participant_name}}.

**Incident Context:**
- **Participant**: {{participant_name}}
- **Date/Time**: {{event_date_time}}
- **Location**: {{incident_location}}
- **Reporter**: {{reporter_name}}

**Current Narrative ({{narrative_phase}} phase):**
{{existing_narrative}}

**Your Task:**
Generate 3-5 specific, focused clarification questions that would help gather missing factual details, context that could help prevent similar incidents, and circumstances that are unclear from the current narrative.

**Requirements:**
- Questions should be clear and specific
- Avoid yes/no questions when possible
- Consider NDIS reporting requirements
- Be sensitive to the participant's needs and dignity

Generate questions as a JSON array with this format:
[
  {
    "question": "Your specific question here",
    "purpose": "Brief explanation of why this detail is important"
  }
]"""

ENHANCEMENT_TEMPLATE = """You are an expert NDIS incident documentation specialist. Create an enhanced narrative section by integrating the original observations with the clarification responses.

**Incident Overview:**
- **Participant**: {{participant_name}}
- **Date/Time**: {{event_date_time}}
- **Location**: {{incident_location}}
- **Reporter**: {{reporter_name}}

**Original Narrative ({{narrative_phase}} phase):**
{{phase_original_narrative}}

**Clarification Responses ({{narrative_phase}} phase):**
{{phase_clarification_responses}}

**Your Task:**
Write the enhanced narrative for the {{narrative_phase}} phase:
1. Preserve the reporter's original meaning, voice and tone
2. Fix only basic grammar, spelling and sentence structure
3. Weave the clarification responses into the narrative where they fit chronologically
4. Use only the information provided; add no assumptions or interpretations
5. Keep the participant's dignity and privacy central

Provide only the enhanced narrative text. Do not include headers, bullets or explanations."""

_CONTEXT_VARIABLES = [
    VariableDefinition("participant_name", "NDIS participant name", required=True),
    VariableDefinition("event_date_time", "Date and time of incident", required=True),
    VariableDefinition(
        "incident_location", "Location where incident occurred",
        default_value="unspecified location",
    ),
    VariableDefinition("reporter_name", "Name of person reporting incident", required=True),
    VariableDefinition("narrative_phase", "Phase of the narrative", required=True),
]

CLARIFICATION_VARIABLES: List[VariableDefinition] = _CONTEXT_VARIABLES + [
    VariableDefinition("existing_narrative", "Current narrative content for the phase", required=True),
]

ENHANCEMENT_VARIABLES: List[VariableDefinition] = _CONTEXT_VARIABLES + [
    VariableDefinition("phase_original_narrative", "Original narrative for this phase", required=True),
    VariableDefinition("phase_clarification_responses", "Answers for this phase only", required=True),
]

DEFAULT_PROMPT_TEMPLATES: List[Dict[str, Any]] = [
    {
        "prompt_name": CLARIFICATION_PROMPT_NAME,
        "prompt_template": CLARIFICATION_TEMPLATE,
        "description": "Generate clarification questions based on incident narrative",
        "workflow_step": "clarification_questions",
        "subsystem": "incidents",
        "max_tokens": 2000,
        "temperature": 0.7,
    },
    {
        "prompt_name": ENHANCEMENT_PROMPT_NAME,
        "prompt_template": ENHANCEMENT_TEMPLATE,
        "description": "Enhance incident narrative with clarification responses",
        "workflow_step": "narrative_enhancement",
        "subsystem": "incidents",
        "max_tokens": 2000,
        "temperature": 0.3,
    },
]

PROMPT_VARIABLES: Dict[str, List[VariableDefinition]] = {
    CLARIFICATION_PROMPT_NAME: CLARIFICATION_VARIABLES,
    ENHANCEMENT_PROMPT_NAME: ENHANCEMENT_VARIABLES,
}
