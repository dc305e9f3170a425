"""Schema guard: deterministic structural validation of a candidate Triple.

``check`` returns a list of issues; empty means the candidate conforms to the
contract for its kind. ``validate`` is the boolean form used by the
orchestrator. Neither raises, whatever the candidate looks like.
"""

from chirality.contracts import KIND_SCHEMAS, DocKind


def _is_string_list(value) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def check(kind: DocKind, candidate) -> list[str]:
    """Check whether ``candidate`` is a well-formed Triple for ``kind``.

    Extra fields inside ``text`` are tolerated; declared fields must have
    their declared types and required fields must be non-blank strings.

    Returns a list of issue strings. Empty list = valid.
    """
    if not isinstance(candidate, dict):
        return [f"Candidate is {type(candidate).__name__}, not an object."]

    schema = KIND_SCHEMAS.get(kind)
    if schema is None:
        return [f"No generation contract for kind '{kind}'."]

    issues = []

    # --- Envelope lists ---
    for key in ("terms_used", "warnings"):
        if key in candidate and not _is_string_list(candidate[key]):
            issues.append(f"'{key}' must be a list of strings.")

    text = candidate.get("text")
    if not isinstance(text, dict):
        issues.append("'text' is missing or not an object.")
        return issues  # Can't check fields without a payload

    # --- Required fields ---
    for name in schema.required:
        value = text.get(name)
        if not isinstance(value, str) or not value.strip():
            issues.append(f"Missing required field '{name}'.")

    # --- Declared field types ---
    for name in schema.string_fields:
        if name in text and name not in schema.required and not isinstance(text[name], str):
            issues.append(f"Field '{name}' must be a string.")
    for name in schema.list_fields:
        if name in text and not _is_string_list(text[name]):
            issues.append(f"Field '{name}' must be a list of strings.")

    return issues


def validate(kind: DocKind, candidate) -> bool:
    """Return True if ``candidate`` passes every check for ``kind``."""
    return not check(kind, candidate)
