"""Pydantic schema for the compatibility report returned by the model.

Defines AnalysisResult and the JSON Schema declared to the model as the
required response format.
"""

from __future__ import annotations

from typing import Any, Dict, List
from pydantic import BaseModel, ConfigDict, Field

SCORE_MIN = 0
SCORE_MAX = 100
PARTICIPANT_COUNT = 2


class AnalysisResult(BaseModel):
    """
    Compatibility report for one chat.
    Field aliases are the camelCase names used on the wire.
    """
    model_config = ConfigDict(strict=True, extra="forbid", populate_by_name=True)

    score: int = Field(..., description="0 to 100")
    summary: str
    communication_style: List[str] = Field(
        ..., alias="communicationStyle", description="Characteristics of each person's communication style"
    )
    strengths: List[str]
    areas_for_improvement: List[str] = Field(..., alias="areasForImprovement")
    advice: str

    def invariant_violations(self) -> List[str]:
        """
        Returns list of violated domain invariants. Empty list = valid.
        """
        failures = []

        if not SCORE_MIN <= self.score <= SCORE_MAX:
            failures.append(f"score must be within {SCORE_MIN}-{SCORE_MAX}, got {self.score}")

        if len(self.communication_style) != PARTICIPANT_COUNT:
            failures.append(
                f"communicationStyle must have exactly {PARTICIPANT_COUNT} entries, "
                f"got {len(self.communication_style)}"
            )

        return failures

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


def response_schema() -> Dict[str, Any]:
    """JSON Schema for the structured response. Strict mode needs every field required."""
    string_list = {"type": "array", "items": {"type": "string"}}
    return {
        "type": "object",
        "properties": {
            "score": {"type": "integer", "description": "0 to 100"},
            "summary": {"type": "string"},
            "communicationStyle": {
                **string_list,
                "description": "Characteristics of each person's communication style",
            },
            "strengths": dict(string_list),
            "areasForImprovement": dict(string_list),
            "advice": {"type": "string"},
        },
        "required": ["score", "summary", "communicationStyle", "strengths", "areasForImprovement", "advice"],
        "additionalProperties": False,
    }
