"""Round-level synthesis: per-kind deltas (W) and the convergence verdict (U)."""

from chirality.contracts import U, W, DocKind, Finals

# Round at which remaining residual risk is reported as Partial rather than Open.
PARTIAL_ROUND = 3

DIFF_REASON = "Auto-diff"

_MISSING = object()


def _differs(a, b) -> bool:
    return a is not b and a != b


def diff(prev: dict, next: dict) -> W:
    """Top-level fields whose values differ between two same-kind payloads.

    Values are compared by deep equality: lists in order, sets and dicts
    regardless of order. A field present on only one side counts as changed.
    The same object is never changed, even when it does not equal itself (NaN).
    """
    prev = prev or {}
    next = next or {}
    changed = [
        key
        for key in set(prev) | set(next)
        if _differs(prev.get(key, _MISSING), next.get(key, _MISSING))
    ]
    return {"changed_keys": sorted(changed), "reason": DIFF_REASON, "evidence": []}


def synthesize(round: int, finals: Finals) -> U:
    """Derive the convergence verdict from the solution statement's residual risk."""
    solution = finals.get(DocKind.M)
    risks = []
    if solution and isinstance(solution.get("text"), dict):
        residual = solution["text"].get("residual_risk")
        if isinstance(residual, list):
            risks = list(residual)

    if not risks:
        convergence = "Closed"
    elif round == PARTIAL_ROUND:
        convergence = "Partial"
    else:
        convergence = "Open"

    return {
        "round": round,
        "convergence": convergence,
        "open_issues": risks,
        "summary": f"Round {round}: {convergence}.",
    }
