"""Orchestrator — produces one document Triple, never raising.

Sequence: compact upstream finals -> retrieve evidence -> compose prompts ->
generate (draft, finalize) -> normalize -> validate.

``produce`` is the single recovery boundary: any failure below it becomes a
fallback Triple whose only warning names the cause. Round drivers can call it
for every kind without per-kind error handling.
"""

import sys

from chirality.agents.generator import Backend, generate
from chirality.backend import ChatBackend
from chirality.config import get_config
from chirality.contracts import DocKind, Finals, Problem, Triple, fallback_text
from chirality.errors import SchemaViolation
from chirality.normalizer import normalize
from chirality.prompts import EVIDENCE_TOP_K, compose
from chirality.retrieval import Retriever, make_retriever, retrieve_evidence
from chirality.validators import check

FALLBACK_PREFIX = "Generation failed: "


def fallback_triple(kind: DocKind, reason: str) -> Triple:
    """Structurally valid placeholder Triple carrying exactly one warning."""
    return {
        "text": fallback_text(kind),
        "terms_used": [],
        "warnings": [f"{FALLBACK_PREFIX}{reason or 'Unknown error'}"],
    }


def is_fallback(kind: DocKind, triple: Triple) -> bool:
    """True if ``triple`` is the placeholder produced by a failed generation."""
    warnings = triple.get("warnings") or []
    return (
        triple.get("text") == fallback_text(kind)
        and len(warnings) == 1
        and warnings[0].startswith(FALLBACK_PREFIX)
    )


async def _run(
    kind: DocKind,
    problem: Problem,
    finals: Finals,
    backend: Backend,
    retriever: Retriever,
) -> Triple:
    config = get_config()
    top_k = int(config.get("retrieval_top_k", EVIDENCE_TOP_K))

    evidence = await retrieve_evidence(retriever, problem["statement"], top_k)
    system, user = compose(kind, problem, finals, evidence)

    raw = await generate(backend, system, user)
    candidate = normalize(kind, raw)

    issues = check(kind, candidate)
    if issues:
        raise SchemaViolation(DocKind(kind).value, issues)

    return {
        "text": candidate["text"],
        "terms_used": list(candidate.get("terms_used") or []),
        "warnings": list(candidate.get("warnings") or []),
    }


async def produce(
    kind: DocKind,
    problem: Problem,
    finals: Finals,
    *,
    backend: Backend | None = None,
    retriever: Retriever | None = None,
) -> Triple:
    """Generate one document of ``kind`` for ``problem`` given prior ``finals``.

    ``finals`` is read, never mutated. Backend and retriever default to the
    configured ones. Always returns a Triple that passes the schema guard;
    cancellation is the only thing that propagates.
    """
    try:
        if backend is None:
            backend = ChatBackend.from_config()
        if retriever is None:
            retriever = make_retriever()
        return await _run(kind, problem, finals, backend, retriever)
    except Exception as e:
        print(f"[CHIRALITY] Error generating {getattr(kind, 'value', kind)}: {e!r}", file=sys.stderr)
        return fallback_triple(kind, str(e) or type(e).__name__)
