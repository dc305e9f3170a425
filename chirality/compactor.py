"""Upstream compactor. Condenses finalized documents for reuse as prompt context.

Compactions are lossy one-liners; they are rebuilt on every prompt and never stored.
"""

from chirality.contracts import UPSTREAM_KINDS, DocKind, Finals

NARRATIVE_CHAR_LIMIT = 400
LIST_ITEM_LIMIT = 6


def _clip(text: str, limit: int = NARRATIVE_CHAR_LIMIT) -> str:
    text = " ".join(str(text).split())
    return text if len(text) <= limit else text[: limit - 3].rstrip() + "..."


def _join(items, limit: int = LIST_ITEM_LIMIT) -> str:
    if not isinstance(items, list):
        return ""
    items = [str(i) for i in items]
    shown = ", ".join(items[:limit])
    if len(items) > limit:
        shown += f" (+{len(items) - limit} more)"
    return shown


def _fields(*pairs: tuple[str, str]) -> str:
    return " | ".join(f"{label}: {value}" for label, value in pairs if value)


def compact_ds(text: dict) -> str:
    return _fields(
        ("field", _clip(text.get("data_field", ""))),
        ("units", text.get("units", "")),
        ("type", text.get("type", "")),
        ("refs", _join(text.get("source_refs"))),
    )


def compact_sp(text: dict) -> str:
    return _fields(
        ("step", _clip(text.get("step", ""))),
        ("purpose", _clip(text.get("purpose", ""))),
        ("in", _join(text.get("inputs"))),
        ("out", _join(text.get("outputs"))),
        ("refs", _join(text.get("refs"))),
    )


def compact_x(text: dict) -> str:
    return _fields(
        ("heading", _clip(text.get("heading", ""))),
        ("narrative", _clip(text.get("narrative", ""))),
        ("refs", _join(text.get("refs"))),
    )


def compact_z(text: dict) -> str:
    return _fields(
        ("item", _clip(text.get("item", ""))),
        ("severity", text.get("severity", "")),
        ("criteria", _clip(text.get("acceptance_criteria", ""))),
    )


def compact_m(text: dict) -> str:
    return _fields(
        ("statement", _clip(text.get("statement", ""))),
        ("residual risk", _join(text.get("residual_risk"))),
    )


_COMPACTORS = {
    DocKind.DS: compact_ds,
    DocKind.SP: compact_sp,
    DocKind.X: compact_x,
    DocKind.Z: compact_z,
    DocKind.M: compact_m,
}


def compact(kind: DocKind, text: dict) -> str:
    """Compact a single document payload of the given kind."""
    if not isinstance(text, dict):
        return ""
    return _COMPACTORS[kind](text)


def compact_upstream(kind: DocKind, finals: Finals) -> dict[DocKind, str]:
    """Compact every finalized document that causally precedes ``kind``.

    Kinds without a final yet are skipped rather than reported as empty.
    """
    upstream = {}
    for prior in UPSTREAM_KINDS.get(kind, ()):
        triple = finals.get(prior)
        if triple:
            upstream[prior] = compact(prior, triple.get("text"))
    return upstream
