"""Document contracts — kinds, field schemas, and the Triple envelope.

Every generated document travels as a Triple:
{
  "text": {kind-specific payload},
  "terms_used": ["string"],
  "warnings": ["string"]
}

Field schemas below are the single source of truth for the prompt composer,
the schema guard and the fallback placeholders.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Literal, TypedDict

CONTRACT_VERSION = "1"

ERROR_MARKER = "Error generating document"


class DocKind(str, Enum):
    DS = "DS"  # data sheet
    SP = "SP"  # standard procedure
    X = "X"  # guidance
    Z = "Z"  # checklist
    M = "M"  # solution statement
    W = "W"  # delta between rounds
    U = "U"  # cycle synthesis
    N = "N"  # learning trace


class DS(TypedDict, total=False):
    data_field: str
    units: str
    type: str
    source_refs: list[str]
    notes: list[str]


class SP(TypedDict, total=False):
    step: str
    purpose: str
    inputs: list[str]
    outputs: list[str]
    preconditions: list[str]
    postconditions: list[str]
    refs: list[str]


class X(TypedDict, total=False):
    heading: str
    narrative: str
    precedents: list[str]
    successors: list[str]
    delta_summary: str
    refs: list[str]


class Z(TypedDict, total=False):
    item: str
    rationale: str
    acceptance_criteria: str
    evidence: list[str]
    severity: str


class M(TypedDict, total=False):
    statement: str
    justification: str
    trace_back: list[str]
    residual_risk: list[str]


class Triple(TypedDict):
    text: dict
    terms_used: list[str]
    warnings: list[str]


class Problem(TypedDict):
    title: str
    statement: str
    initialVector: list[str]


class Evidence(TypedDict):
    citation_id: str
    snippet: str


class W(TypedDict):
    changed_keys: list[str]
    reason: str
    evidence: list


Convergence = Literal["Closed", "Partial", "Open"]


class U(TypedDict):
    round: int
    convergence: Convergence
    open_issues: list[str]
    summary: str


class LearningTrace(TypedDict):
    round: int
    convergence: Convergence
    changed: dict[str, list[str]]  # kind -> changed_keys
    warnings: dict[str, list[str]]  # kind -> warnings carried by that round's Triple


Finals = dict[DocKind, Triple]


@dataclass(frozen=True)
class KindSchema:
    title: str
    required: tuple[str, ...]
    string_fields: tuple[str, ...]
    list_fields: tuple[str, ...]

    @property
    def fields(self) -> tuple[str, ...]:
        return self.string_fields + self.list_fields


KIND_SCHEMAS: dict[DocKind, KindSchema] = {
    DocKind.DS: KindSchema(
        title="Data Sheet",
        required=("data_field",),
        string_fields=("data_field", "units", "type"),
        list_fields=("source_refs", "notes"),
    ),
    DocKind.SP: KindSchema(
        title="Standard Procedure",
        required=("step",),
        string_fields=("step", "purpose"),
        list_fields=("inputs", "outputs", "preconditions", "postconditions", "refs"),
    ),
    DocKind.X: KindSchema(
        title="Guidance",
        required=("heading", "narrative"),
        string_fields=("heading", "narrative", "delta_summary"),
        list_fields=("precedents", "successors", "refs"),
    ),
    DocKind.Z: KindSchema(
        title="Checklist",
        required=("item",),
        string_fields=("item", "rationale", "acceptance_criteria", "severity"),
        list_fields=("evidence",),
    ),
    DocKind.M: KindSchema(
        title="Solution Statement",
        required=("statement",),
        string_fields=("statement", "justification"),
        list_fields=("trace_back", "residual_risk"),
    ),
}

# Generation order within a round; a kind may only see kinds listed before it.
GENERATION_ORDER: tuple[DocKind, ...] = (DocKind.DS, DocKind.SP, DocKind.X, DocKind.Z, DocKind.M)

UPSTREAM_KINDS: dict[DocKind, tuple[DocKind, ...]] = {
    DocKind.DS: (),
    DocKind.SP: (DocKind.DS,),
    DocKind.X: (DocKind.DS, DocKind.SP),
    DocKind.Z: (DocKind.DS, DocKind.SP, DocKind.X),
    DocKind.M: (DocKind.DS, DocKind.SP, DocKind.X),
}

_FALLBACK_TEXT: dict[DocKind, dict] = {
    DocKind.DS: {"data_field": ERROR_MARKER},
    DocKind.SP: {"step": ERROR_MARKER},
    DocKind.X: {"heading": "Error", "narrative": ERROR_MARKER},
    DocKind.Z: {"item": ERROR_MARKER},
}


def fallback_text(kind: DocKind) -> dict:
    """Minimal placeholder payload for a kind; only the required fields are set."""
    return dict(_FALLBACK_TEXT.get(kind, {"statement": ERROR_MARKER}))
