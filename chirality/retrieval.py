"""Retrieval service boundary: ranked evidence snippets with citation IDs.

The service itself lives outside this package. ``HttpRetriever`` talks to it
over HTTP:

    POST {base_url}/retrieve  {"query": "...", "top_k": 12}
    -> {"results": [{"citation_id": "CIT:src#p", "snippet": "..."}]}

Retrieval absence degrades quality, not correctness: callers go through
``retrieve_evidence``, which turns any outage into empty evidence.
"""

import sys
from typing import Protocol

import httpx

from chirality.config import get_config
from chirality.contracts import Evidence
from chirality.errors import RetrievalUnavailable


class Retriever(Protocol):
    async def retrieve(self, query: str, top_k: int) -> list[Evidence]: ...


class NullRetriever:
    """Retriever used when no service is configured."""

    async def retrieve(self, query: str, top_k: int) -> list[Evidence]:
        return []


class HttpRetriever:
    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def retrieve(self, query: str, top_k: int) -> list[Evidence]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(
                    f"{self.base_url}/retrieve",
                    json={"query": query, "top_k": top_k},
                )
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise RetrievalUnavailable(f"Retrieval failed: {e!r}") from e

        items = data.get("results", []) if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise RetrievalUnavailable("Retrieval response has no results list.")

        evidence: list[Evidence] = []
        for item in items:
            if len(evidence) >= top_k:
                break
            if not isinstance(item, dict):
                continue
            citation_id = item.get("citation_id")
            snippet = item.get("snippet")
            if not citation_id or not isinstance(snippet, str):
                continue
            evidence.append(Evidence(citation_id=str(citation_id), snippet=snippet))

        return evidence


def make_retriever() -> Retriever:
    """Build the configured retriever; NullRetriever if no URL is set."""
    config = get_config()
    url = config.get("retrieval_url")
    if not url:
        return NullRetriever()
    return HttpRetriever(base_url=url, timeout=float(config.get("retrieval_timeout", 30.0)))


async def retrieve_evidence(retriever: Retriever, query: str, top_k: int) -> list[Evidence]:
    """Retrieve evidence, treating any retriever failure as no evidence.

    Cancellation still propagates.
    """
    try:
        return await retriever.retrieve(query, top_k)
    except RetrievalUnavailable as e:
        print(f"[CHIRALITY] Warning: {e}. Proceeding without evidence.", file=sys.stderr)
    except Exception as e:
        print(
            f"[CHIRALITY] Warning: retriever error {e!r}. Proceeding without evidence.",
            file=sys.stderr,
        )
    return []
