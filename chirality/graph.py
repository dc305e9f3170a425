"""LangGraph StateGraph definition for the document round loop.

One round produces every generatable kind in causal order, then synthesizes
a convergence verdict. The loop ends when a round closes or the round
ceiling is hit.
"""

import sys

from langgraph.graph import END, StateGraph
from tenacity import AsyncRetrying, retry_if_result, stop_after_attempt, wait_exponential

from chirality.agents.generator import Backend
from chirality.config import get_config
from chirality.contracts import GENERATION_ORDER, DocKind, Finals, Problem, Triple
from chirality.orchestrate import is_fallback, produce
from chirality.retrieval import Retriever
from chirality.state import RoundState
from chirality.synthesis import PARTIAL_ROUND, diff, synthesize

# Nodes executed per round: one per kind, plus synthesize and increment.
_STEPS_PER_ROUND = len(GENERATION_ORDER) + 2


async def produce_with_retry(
    kind: DocKind,
    problem: Problem,
    finals: Finals,
    *,
    backend: Backend | None = None,
    retriever: Retriever | None = None,
) -> Triple:
    """Call ``produce`` again with exponential backoff while it returns a fallback.

    Returns the last Triple once retries run out, fallback or not.
    """
    config = get_config()
    retries = int(config.get("produce_max_retries", 1))

    retrying = AsyncRetrying(
        stop=stop_after_attempt(retries + 1),  # +1 because first attempt counts
        wait=wait_exponential(
            multiplier=1,
            min=config.get("retry_wait_min", 2),
            max=config.get("retry_wait_max", 16),
        ),
        retry=retry_if_result(lambda triple: is_fallback(kind, triple)),
        retry_error_callback=lambda state: state.outcome.result(),
        before_sleep=lambda state: print(
            f"[CHIRALITY] {kind.value} fell back: {state.outcome.result()['warnings'][0]}. "
            f"Retrying in {state.next_action.sleep:.0f}s "
            f"(attempt {state.attempt_number}/{retries})...",
            file=sys.stderr,
        ),
    )
    return await retrying(
        produce, kind, problem, finals, backend=backend, retriever=retriever
    )


def _make_produce_node(kind: DocKind, backend: Backend | None, retriever: Retriever | None):
    """Build the node that produces ``kind`` and records its delta against the last final.

    A fallback never replaces an accepted final; it only shows up in the
    round's warnings. It becomes the final only when nothing was accepted yet.
    """

    async def _produce_node(state: RoundState) -> dict:
        finals = state["finals"]
        triple = await produce_with_retry(
            kind, state["problem"], finals, backend=backend, retriever=retriever
        )
        updates = {}
        if triple["warnings"]:
            updates["warnings"] = {**state["warnings"], kind.value: list(triple["warnings"])}

        previous = finals.get(kind)
        if is_fallback(kind, triple) and previous is not None:
            print(
                f"[CHIRALITY] Keeping previous {kind.value} final after fallback.",
                file=sys.stderr,
            )
            return updates

        updates["finals"] = {**finals, kind: triple}
        if previous is not None:
            updates["deltas"] = {
                **state["deltas"],
                kind.value: diff(previous["text"], triple["text"]),
            }
        return updates

    return _produce_node


def _synthesize_round(state: RoundState) -> dict:
    """Compute the round's verdict and append its learning trace.

    A fallback solution statement carries no residual risk, so it can never
    close the round; its failure reason is reported as the open issue instead.
    """
    finals = state["finals"]
    verdict = synthesize(state["round"], finals)

    solution = finals.get(DocKind.M)
    if solution is not None and is_fallback(DocKind.M, solution):
        convergence = "Partial" if state["round"] == PARTIAL_ROUND else "Open"
        verdict = {
            **verdict,
            "convergence": convergence,
            "open_issues": list(solution["warnings"]),
            "summary": f"Round {state['round']}: {convergence}.",
        }

    trace = {
        "round": state["round"],
        "convergence": verdict["convergence"],
        "changed": {k: w["changed_keys"] for k, w in state["deltas"].items()},
        "warnings": dict(state["warnings"]),
    }
    updates = {"convergence": verdict, "traces": state["traces"] + [trace]}
    if verdict["convergence"] == "Closed":
        updates["status"] = "closed"
    return updates


def _route_after_round(state: RoundState) -> str:
    """Conditional edge: decide next step after synthesis.

    1. Closed -> end
    2. round >= max_rounds -> timeout
    3. otherwise -> next round
    """
    if state["convergence"]["convergence"] == "Closed":
        return "end"
    max_rounds = state.get("max_rounds") or get_config()["max_rounds"]
    if state["round"] >= max_rounds:
        return "timeout"
    return "next_round"


def _increment_round(state: RoundState) -> dict:
    """Passthrough node that bumps the round and clears per-round deltas and warnings."""
    return {"round": state["round"] + 1, "deltas": {}, "warnings": {}}


def _set_timeout(state: RoundState) -> dict:
    """Set status to max_rounds_reached when the round ceiling is hit."""
    return {"status": "max_rounds_reached"}


def _node_name(kind: DocKind) -> str:
    return f"produce_{kind.value}"


def build_graph(backend: Backend | None = None, retriever: Retriever | None = None):
    """Compile the round graph. ``None`` dependencies resolve to the configured ones per call."""
    workflow = StateGraph(RoundState)

    for kind in GENERATION_ORDER:
        workflow.add_node(_node_name(kind), _make_produce_node(kind, backend, retriever))
    workflow.add_node("synthesize", _synthesize_round)
    workflow.add_node("increment", _increment_round)
    workflow.add_node("timeout", _set_timeout)

    workflow.set_entry_point(_node_name(GENERATION_ORDER[0]))

    for current, following in zip(GENERATION_ORDER, GENERATION_ORDER[1:]):
        workflow.add_edge(_node_name(current), _node_name(following))
    workflow.add_edge(_node_name(GENERATION_ORDER[-1]), "synthesize")

    workflow.add_conditional_edges(
        "synthesize",
        _route_after_round,
        {
            "end": END,
            "timeout": "timeout",
            "next_round": "increment",
        },
    )

    workflow.add_edge("timeout", END)
    workflow.add_edge("increment", _node_name(GENERATION_ORDER[0]))

    return workflow.compile()


graph = build_graph()


def initial_state(problem: Problem, max_rounds: int | None = None) -> RoundState:
    """Fresh state for round 1 with no finals."""
    return {
        "problem": problem,
        "finals": {},
        "deltas": {},
        "warnings": {},
        "round": 1,
        "max_rounds": max_rounds or get_config()["max_rounds"],
        "convergence": None,
        "traces": [],
        "status": "in_progress",
    }


async def run_rounds(
    problem: Problem,
    *,
    max_rounds: int | None = None,
    backend: Backend | None = None,
    retriever: Retriever | None = None,
) -> RoundState:
    """Run the round loop to completion and return the final state."""
    state = initial_state(problem, max_rounds)
    compiled = graph if backend is None and retriever is None else build_graph(backend, retriever)
    return await compiled.ainvoke(
        state,
        config={"recursion_limit": state["max_rounds"] * _STEPS_PER_ROUND + 10},
    )
