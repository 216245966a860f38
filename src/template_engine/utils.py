"""Small text helpers shared by the collaborators and the pipeline."""

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Placeholder names
# ---------------------------------------------------------------------------

PLACEHOLDER_PATTERN = re.compile(r"\[([A-Za-z][A-Za-z0-9_ ]*)\]")


def to_pascal_case(name: str) -> str:
    """Turn ``CLIENT_NAME`` / ``client name`` into ``ClientName``."""
    words = re.split(r"[\s_\-]+", name.strip())
    return "".join(word[:1].upper() + word[1:].lower() for word in words if word)


def find_placeholders(text: str) -> list[str]:
    """Bracketed literals such as ``[CLIENT_NAME]`` in order of appearance."""
    return [m.group(0) for m in PLACEHOLDER_PATTERN.finditer(text)]


# ---------------------------------------------------------------------------
# LLM reply parsing
# ---------------------------------------------------------------------------

def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` fence from a model reply."""
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def parse_json_object(text: str) -> dict[str, Any]:
    """Parse a model reply that should contain a single JSON object.

    Raises:
        ValueError: If the reply is not a JSON object.
    """
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ValueError(f"Reply is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data
