"""Persists the final round state as JSON."""

import json
from pathlib import Path

from chirality.config import PROJECT_ROOT, get_config
from chirality.state import RoundState


def _slug(title: str) -> str:
    words = "".join(c.lower() if c.isalnum() else " " for c in title).split()
    return "-".join(words[:8])


def serialize_run(state: RoundState) -> dict:
    """JSON-ready view of a finished run; kind keys become plain strings."""
    return {
        "problem": state["problem"],
        "status": state["status"],
        "round": state["round"],
        "convergence": state["convergence"],
        "finals": {getattr(k, "value", k): v for k, v in state["finals"].items()},
        "deltas": state["deltas"],
        "traces": state["traces"],
    }


def write_run(state: RoundState) -> Path:
    """Write the run to the configured output directory.

    The filename derives from the problem title; an existing file is never
    overwritten.

    Returns the Path to the written file.
    """
    config = get_config()
    base_path = PROJECT_ROOT / config["output_path"]  # relative paths anchor to the project root
    output_dir = base_path.parent
    output_dir.mkdir(parents=True, exist_ok=True)

    stem = _slug(state["problem"].get("title", "")) or base_path.stem

    # Find a non-conflicting filename
    output_path = output_dir / f"{stem}.json"
    counter = 1
    while output_path.exists():
        counter += 1
        output_path = output_dir / f"{stem} ({counter}).json"

    output_path.write_text(json.dumps(serialize_run(state), indent=2), encoding="utf-8")
    return output_path
