"""Prompt composer — builds the system and user prompts for one document kind.

Pure functions of their inputs. The constraint list is fixed and versioned
with the contracts (CONTRACT_VERSION); callers cannot change it.
"""

import json

from chirality.compactor import compact_upstream
from chirality.contracts import (
    CONTRACT_VERSION,
    GENERATION_ORDER,
    KIND_SCHEMAS,
    DocKind,
    Evidence,
    Finals,
    Problem,
)

EVIDENCE_TOP_K = 12

CONSTRAINTS = (
    "Prefer cited evidence when available.",
    "Populate source_refs/refs/trace_back with citation IDs (CIT:src#p).",
    "No filler; keep payload fields crisp and specific.",
)

SYSTEM_PROMPT = """\
You are the document generator in an iterative, evidence-grounded problem-solving framework.

Each round produces a fixed set of interrelated documents: a Data Sheet (DS), a Standard \
Procedure (SP), Guidance (X), a Checklist (Z) and a Solution Statement (M). Later documents \
build on earlier ones, and every round refines the documents of the round before it.

Problem: {title}

{decided}

You MUST respond with a single JSON object of this exact shape:
{{
  "text": {{ ...fields of the requested document kind... }},
  "terms_used": ["string — domain terms the document relies on"],
  "warnings": ["string — caveats about gaps in evidence or assumptions"]
}}

Rules:
- "text" holds the document fields directly. Do NOT nest them under the kind name.
- Every required field must be present and non-empty.
- Fields typed as lists must be JSON arrays of strings.
- Respond ONLY with the JSON object. No markdown fences, no commentary.

Contract version: {version}
"""


def build_system(title: str, finals: Finals) -> str:
    """Build the system prompt, telling the model which kinds are already settled."""
    finalized = [kind.value for kind in GENERATION_ORDER if finals.get(kind)]
    if finalized:
        decided = (
            "Documents already finalized in earlier steps (treat them as decided context): "
            + ", ".join(finalized)
            + "."
        )
    else:
        decided = "No documents have been finalized yet."
    return SYSTEM_PROMPT.format(title=title, decided=decided, version=CONTRACT_VERSION)


def _schema_block(kind: DocKind) -> str:
    schema = KIND_SCHEMAS[kind]
    shape = {}
    for name in schema.string_fields:
        shape[name] = "string (required)" if name in schema.required else "string"
    for name in schema.list_fields:
        shape[name] = ["string"]
    return json.dumps(shape, indent=2)


def build_user(
    kind: DocKind,
    *,
    problem_statement: str,
    initial_vector: list[str],
    upstream: dict[DocKind, str],
    retrieved: list[Evidence],
    constraints: tuple[str, ...] = CONSTRAINTS,
) -> str:
    """Construct the user prompt for ``kind``."""
    schema = KIND_SCHEMAS[kind]
    parts = [
        f"## Document Kind\n{kind.value} — {schema.title}",
        f"\n## Required \"text\" Fields\n```json\n{_schema_block(kind)}\n```",
        f"\n## Problem Statement\n{problem_statement}",
    ]

    if initial_vector:
        parts.append("\n## Initial Vector")
        parts.extend(f"- {item}" for item in initial_vector)

    if upstream:
        parts.append("\n## Upstream Documents (compacted)")
        for prior, summary in upstream.items():
            parts.append(f"- {DocKind(prior).value}: {summary}")

    evidence = retrieved[:EVIDENCE_TOP_K]
    if evidence:
        parts.append("\n## Retrieved Evidence")
        for item in evidence:
            parts.append(f"[{item['citation_id']}] {item['snippet']}")
    else:
        parts.append("\n## Retrieved Evidence\nNone available; do not invent citation IDs.")

    parts.append("\n## Constraints")
    parts.extend(f"- {rule}" for rule in constraints)

    return "\n".join(parts)


def compose(
    kind: DocKind,
    problem: Problem,
    finals: Finals,
    evidence: list[Evidence] = (),
) -> tuple[str, str]:
    """Return (system_prompt, user_prompt) for one generation of ``kind``."""
    kind = DocKind(kind)
    system = build_system(problem["title"], finals)
    user = build_user(
        kind,
        problem_statement=problem["statement"],
        initial_vector=list(problem.get("initialVector", [])),
        upstream=compact_upstream(kind, finals),
        retrieved=list(evidence),
    )
    return system, user
