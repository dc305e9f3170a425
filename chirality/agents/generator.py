"""Generation engine: two sequential backend calls per document.

1. Draft pass: higher temperature, exploratory candidate.
2. Finalize pass: lower temperature, conditioned on the draft as ``prior``.

Either pass failing surfaces as a single GenerationFailure. Retries are the
round driver's business, not this module's.
"""

from typing import Any, Protocol

from chirality.config import get_config
from chirality.errors import GenerationFailure

DRAFT_TEMPERATURE = 0.7
FINAL_TEMPERATURE = 0.5


class Backend(Protocol):
    async def call(
        self, system: str, user: str, *, temperature: float, prior: Any = None
    ) -> Any: ...


async def generate(backend: Backend, system: str, user: str) -> Any:
    """Run draft then finalize and return the finalize pass's raw payload."""
    config = get_config()
    draft_temperature = config.get("draft_temperature", DRAFT_TEMPERATURE)
    final_temperature = config.get("final_temperature", FINAL_TEMPERATURE)

    try:
        draft = await backend.call(system, user, temperature=draft_temperature)
    except Exception as e:
        raise GenerationFailure("draft", e) from e

    try:
        return await backend.call(system, user, temperature=final_temperature, prior=draft)
    except Exception as e:
        raise GenerationFailure("finalize", e) from e
