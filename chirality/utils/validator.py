"""Input validation — checks the Problem before any round is run."""

from chirality.contracts import Problem


def validate_problem(problem: dict) -> Problem:
    """Validate and normalize a Problem mapping.

    Returns a new Problem with stripped title/statement and a list-typed
    initialVector. Raises ValueError if title or statement is missing or
    blank, or if initialVector is not a list of strings.
    """
    if not isinstance(problem, dict):
        raise ValueError("Problem must be a mapping with title, statement and initialVector.")

    cleaned = {}
    for key in ("title", "statement"):
        value = problem.get(key)
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"Problem {key} must be a non-empty string.")
        cleaned[key] = value.strip()

    vector = problem.get("initialVector", [])
    if not isinstance(vector, list) or not all(isinstance(v, str) for v in vector):
        raise ValueError("Problem initialVector must be a list of strings.")
    cleaned["initialVector"] = [v.strip() for v in vector if v.strip()]

    return cleaned
