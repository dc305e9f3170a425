"""Generation backend — LangChain chat models returning parsed JSON.

The backend is assumed to be unreliable: it may return anything JSON-shaped,
or something that is not JSON at all. Parsing errors propagate to the caller.
"""

import json
from typing import Any

from langchain_anthropic import ChatAnthropic
from langchain_google_genai import ChatGoogleGenerativeAI

from chirality.config import get_config
from chirality.utils.parsing import parse_json_payload

PROVIDERS = {"anthropic", "google"}

PRIOR_INSTRUCTION = (
    "Below is your previous draft for this document. Finalize it: keep what is "
    "supported by evidence, fix unsupported claims, fill any empty required fields, "
    "and return the complete JSON object in the required shape."
)


class ChatBackend:
    """Calls a chat model with a system/user prompt pair and parses the JSON reply."""

    def __init__(self, *, provider: str, model: str) -> None:
        if provider not in PROVIDERS:
            raise ValueError(f"Unknown provider '{provider}'. Must be one of: {PROVIDERS}")
        self.provider = provider
        self.model = model

    @classmethod
    def from_config(cls) -> "ChatBackend":
        config = get_config()
        return cls(provider=config.get("provider", "anthropic"), model=config["model"])

    def _make_llm(self, temperature: float):
        if self.provider == "google":
            return ChatGoogleGenerativeAI(model=self.model, temperature=temperature)
        return ChatAnthropic(model=self.model, temperature=temperature)

    @staticmethod
    def _build_messages(system: str, user: str, prior: Any = None) -> list[dict]:
        messages = [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ]
        if prior is not None:
            messages.append({
                "role": "user",
                "content": f"{PRIOR_INSTRUCTION}\n\n```json\n{json.dumps(prior, indent=2)}\n```",
            })
        return messages

    async def call(
        self,
        system: str,
        user: str,
        *,
        temperature: float,
        prior: Any = None,
    ) -> Any:
        """Run one generation and return the parsed JSON payload."""
        llm = self._make_llm(temperature)
        response = await llm.ainvoke(self._build_messages(system, user, prior))
        return parse_json_payload(response.content)
