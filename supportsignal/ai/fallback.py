"""Static content returned when every AI call has failed.

Each payload mirrors the shape of the corresponding AI result with a
``metadata.status`` of ``fallback_response`` so callers never block on
AI availability.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from supportsignal.ai.client import generate_correlation_id

FALLBACK_QUESTIONS: Dict[str, List[str]] = {
    "before_event": [
        "What was the participant doing in the hour before the incident?",
        "Were there any unusual circumstances or changes to routine before the event?",
    ],
    "during_event": [
        "Can you describe the sequence of events during the incident?",
        "Were there any witnesses present during the event?",
    ],
    "end_of_event": [
        "How did the incident conclude?",
        "What immediate actions were taken to address the situation?",
    ],
    "post_event_support": [
        "What support was provided to the participant after the incident?",
        "Were any follow-up actions or referrals made?",
    ],
}

# Narrative phase name -> key used in FALLBACK_QUESTIONS
PHASE_KEYS = {
    "before_event": "before_event",
    "during_event": "during_event",
    "end_event": "end_of_event",
    "post_event": "post_event_support",
}

MANUAL_ANALYSIS_TEXT = """**Unable to Complete AI Analysis**

The AI service is currently unavailable. Please try again later or complete the analysis manually.

### Manual Analysis Required
- Review the incident narrative for patterns or contributing factors
- Consider environmental, procedural, or support-related conditions
- Document any immediate causes or escalating factors identified

*This is a fallback response generated when AI analysis is unavailable.*"""

NO_QA_PAIRS_TEXT = "No valid question-answer pairs provided."


def _metadata(reason: str, **fields: Any) -> Dict[str, Any]:
    return {
        "processed_at": datetime.now(timezone.utc).isoformat(),
        "status": "fallback_response",
        "correlation_id": generate_correlation_id(),
        "processing_time_ms": 0,
        "tokens_used": 0,
        "cost": 0,
        "fallback_reason": reason,
        **fields,
    }


class FallbackHandler:
    """Generators for predefined responses used when AI is unavailable."""

    @staticmethod
    def questions_for_phase(phase: str) -> List[str]:
        """Return the predefined questions for a narrative phase."""
        return list(FALLBACK_QUESTIONS.get(PHASE_KEYS.get(phase, phase), []))

    @staticmethod
    def generate_clarification_questions(
        participant_name: str,
        reporter_name: str,
        event_date_time: str,
        location: str,
    ) -> Dict[str, Any]:
        return {
            "clarification_questions": {key: list(value) for key, value in FALLBACK_QUESTIONS.items()},
            "metadata": _metadata(
                "AI service unavailable - using predefined questions",
                report_context={
                    "participant_name": participant_name,
                    "reporter_name": reporter_name,
                    "event_datetime": event_date_time,
                    "location": location,
                },
            ),
        }

    @staticmethod
    def enhance_narrative(
        phase: str, answers: List[Dict[str, Optional[str]]], instruction: str = ""
    ) -> Dict[str, Any]:
        """Format answered questions as ``Q:``/``A:`` pairs.

        Args:
            phase: Narrative phase being enhanced
            answers: Items with ``question`` and ``answer`` keys
            instruction: Unused enhancement instruction, kept for parity with the AI call

        Returns:
            Payload with ``output``/``narrative`` text and fallback metadata
        """
        pairs = [
            f"Q: {item['question'].strip()}\nA: {item['answer'].strip()}"
            for item in answers
            if (item.get("question") or "").strip() and (item.get("answer") or "").strip()
        ]
        text = "\n\n".join(pairs) or NO_QA_PAIRS_TEXT

        return {
            "output": text,
            "narrative": text,
            "metadata": _metadata(
                "AI service unavailable - returning formatted Q&A pairs",
                phase=phase,
                answers_processed=len(answers),
            ),
        }

    @staticmethod
    def analyze_contributing_conditions(
        participant_name: str,
        reporter_name: str,
        event_date_time: str,
        location: str,
    ) -> Dict[str, Any]:
        return {
            "analysis": MANUAL_ANALYSIS_TEXT,
            "metadata": _metadata(
                "AI service unavailable - manual analysis required",
                incident_context={
                    "participant_name": participant_name,
                    "reporter_name": reporter_name,
                    "event_datetime": event_date_time,
                    "location": location,
                },
            ),
        }

    @staticmethod
    def generate_mock_answers(phase: str) -> Dict[str, Any]:
        answers = {
            "answers": [
                {
                    "question_id": "fallback-001",
                    "question": "Fallback question unavailable",
                    "answer": (
                        "AI service is currently unavailable. Mock answers cannot be "
                        "generated at this time. Please try again later."
                    ),
                }
            ]
        }
        return {
            "mock_answers": {"output": json.dumps(answers)},
            "metadata": _metadata(
                "AI service unavailable - cannot generate mock content",
                phase=phase,
                questions_answered=0,
            ),
        }
