"""Prompts and output contracts for the finishing stage."""

from pydantic import BaseModel, ConfigDict, Field

SUMMARY_INSTRUCTION = "Answer the initial <QUESTION> in a single sentence based on the <REASONING>"

TOOL_INSTRUCTION = (
    SUMMARY_INSTRUCTION
    + ". If the <REASONING> is not enough to answer, or the question needs current"
    " information, call the web_search tool with a focused query instead."
)


def build_messages(question: str, reasoning: str, system_instruction: str) -> list[dict[str, str]]:
    user_content = (
        f"<QUESTION>\n{question}\n</QUESTION>\n"
        f"<REASONING>\n{reasoning}\n</REASONING>"
    )
    return [
        {"role": "system", "content": system_instruction},
        {"role": "user", "content": user_content},
    ]


STRUCTURED_SUMMARY_SCHEMA = {
    "type": "object",
    "properties": {
        "summary": {"type": "string", "description": "A one-sentence summary of the answer."},
        "bullet_points": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Key points related to the answer.",
        },
        "reasoning_steps": {
            "type": "integer",
            "minimum": 0,
            "description": "The number of steps in the chain of thought provided.",
        },
        "follow_up_prompts": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Suggested prompts for follow-up conversations.",
        },
    },
    "required": ["summary", "bullet_points", "reasoning_steps", "follow_up_prompts"],
    "additionalProperties": False,
}

STRUCTURED_RESPONSE_FORMAT = {
    "type": "json_schema",
    "json_schema": {
        "name": "structured_response",
        "schema": STRUCTURED_SUMMARY_SCHEMA,
        "strict": True,
    },
}


class StructuredSummaryPayload(BaseModel):
    """Validates the provider's structured output against the declared schema.

    Strict mode: no coercion, so "3" or true is not a step count.
    """

    model_config = ConfigDict(extra="forbid", strict=True)

    summary: str
    bullet_points: list[str]
    reasoning_steps: int = Field(..., ge=0)
    follow_up_prompts: list[str]
