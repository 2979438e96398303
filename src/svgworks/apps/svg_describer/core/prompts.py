"""Prompt and response schema for the description stage."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

__all__ = [
    "DESCRIPTION_FIELD",
    "DESCRIPTION_PROMPT",
    "DESCRIPTION_SCHEMA",
    "StagePrompt",
    "response_format",
]

DESCRIPTION_FIELD = "description"


@dataclass(frozen=True)
class StagePrompt:
    """Encapsulates the system and user prompt for a single stage."""

    system: str
    user_template: str
    max_new_tokens: Optional[int] = None

    def render(self, **kwargs: Any) -> str:
        return self.user_template.format(**kwargs) if kwargs else self.user_template


DESCRIPTION_PROMPT = StagePrompt(
    system=(
        "You write alt text for illustrations. Reply with a JSON object that has a "
        f"single key '{DESCRIPTION_FIELD}' and nothing else."
    ),
    user_template="Describe the scene depicted in this illustration.",
    max_new_tokens=200,
)

DESCRIPTION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        DESCRIPTION_FIELD: {
            "type": "string",
            "description": (
                "A 1-2 sentence description of the scene depicted in the "
                "illustration, focusing on the main subject and action"
            ),
        }
    },
    "required": [DESCRIPTION_FIELD],
    "additionalProperties": False,
}


def response_format() -> Dict[str, Any]:
    """OpenAI-style structured output constraint for the description call."""

    return {
        "type": "json_schema",
        "json_schema": {
            "name": "scene_description",
            "strict": True,
            "schema": DESCRIPTION_SCHEMA,
        },
    }
