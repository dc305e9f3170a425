"""Output normalizer. Strips the known wrapper layers the backend adds.

Only two shapes are recognized, checked in order:

1. wrapped-under-text: {"text": {"<KIND>": {...}}, "terms_used": [...], ...}
2. direct-kind:        {"<KIND>": {...}}            (no "text" key)

Anything else passes through untouched so the schema guard can reject it.

At most one layer is removed per call. A payload wrapped twice, such as
{"DS": {"DS": {...}}}, comes out still wrapped and fails the schema guard;
normalizing is idempotent only for the shapes above.
"""

import sys

from chirality.contracts import DocKind


def normalize(kind: DocKind, raw):
    """Return ``raw`` with at most one recognized wrapper layer removed."""
    if not isinstance(raw, dict):
        return raw

    key = DocKind(kind).value
    text = raw.get("text")

    if isinstance(text, dict) and text.get(key):
        print(f"[CHIRALITY] Unwrapping extra {key} layer from text wrapper", file=sys.stderr)
        return {
            **raw,
            "text": text[key],
            "terms_used": raw.get("terms_used") or [],
            "warnings": raw.get("warnings") or [],
        }

    if raw.get(key) and "text" not in raw:
        print(f"[CHIRALITY] Unwrapping direct {key} wrapper", file=sys.stderr)
        return {
            "text": raw[key],
            "terms_used": raw.get("terms_used") or [],
            "warnings": raw.get("warnings") or [],
        }

    return raw
