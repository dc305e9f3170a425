"""Shared parsing helpers for raw backend responses."""

import json
import re
from typing import Any

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)


def strip_fences(text: str) -> str:
    """Strip markdown code fences from LLM output if present."""
    match = _FENCE_RE.search(text)
    return match.group(1).strip() if match else text.strip()


def content_text(content: Any) -> str:
    """Flatten a chat message ``content`` into plain text.

    LangChain chat models return either a string or a list of content blocks
    (dicts with ``type``/``text``, or bare strings).
    """
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts)
    return str(content)


def parse_json_payload(content: Any) -> Any:
    """Parse a model response into a JSON value.

    Raises json.JSONDecodeError when the response is not JSON after fence stripping.
    """
    return json.loads(strip_fences(content_text(content)))
