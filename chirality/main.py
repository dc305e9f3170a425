"""Entry point: loads and validates a problem, runs the round loop, writes the run."""

import asyncio
import sys
from pathlib import Path

import yaml

from chirality.graph import run_rounds
from chirality.utils.validator import validate_problem
from chirality.utils.writer import write_run

USAGE = "Usage: chirality <problem.yaml> [--max-rounds N]"


def load_problem(path: Path) -> dict:
    """Read a problem file (YAML or JSON) and validate it."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    return validate_problem(data)


def run(problem_path: Path, max_rounds: int | None = None) -> Path:
    """Run the full round loop for the problem at ``problem_path``.

    Args:
        problem_path: YAML/JSON file with title, statement and initialVector.
        max_rounds: Override for the round ceiling. None uses config default.
    """
    problem = load_problem(problem_path)
    final_state = asyncio.run(run_rounds(problem, max_rounds=max_rounds))

    for trace in final_state["traces"]:
        changed = sum(len(keys) for keys in trace["changed"].values())
        warned = len(trace["warnings"])
        print(
            f"[CHIRALITY] Round {trace['round']} — {trace['convergence']}, "
            f"{changed} changed fields, {warned} kinds with warnings"
        )

    output_path = write_run(final_state)
    print(f"[CHIRALITY] {final_state['convergence']['summary']}")
    print(f"[CHIRALITY] Status: {final_state['status']}")
    print(f"[CHIRALITY] Output written to: {output_path}")
    return output_path


def main() -> None:
    """CLI entry point. Accepts a problem file path and an optional round ceiling."""
    args = sys.argv[1:]
    max_rounds = None

    if "--max-rounds" in args:
        idx = args.index("--max-rounds")
        try:
            max_rounds = int(args[idx + 1])
        except (IndexError, ValueError):
            print(USAGE, file=sys.stderr)
            sys.exit(2)
        del args[idx:idx + 2]

    if len(args) != 1:
        print(USAGE, file=sys.stderr)
        sys.exit(2)

    try:
        run(Path(args[0]), max_rounds=max_rounds)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"[CHIRALITY] Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
