"""Shared fixtures for the chirality test suite."""

import pytest
from unittest.mock import patch

from chirality.contracts import DocKind


class FakeBackend:
    """Backend double: replays queued payloads (or raises queued exceptions) and records calls."""

    def __init__(self, responses):
        self._responses = list(responses)
        self.calls = []

    async def call(self, system, user, *, temperature, prior=None):
        self.calls.append(
            {"system": system, "user": user, "temperature": temperature, "prior": prior}
        )
        if not self._responses:
            raise RuntimeError("FakeBackend ran out of responses")
        response = self._responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


class FakeRetriever:
    def __init__(self, evidence=None, error=None):
        self.evidence = evidence or []
        self.error = error
        self.queries = []

    async def retrieve(self, query, top_k):
        self.queries.append((query, top_k))
        if self.error:
            raise self.error
        return self.evidence[:top_k]


@pytest.fixture
def problem():
    """Minimal valid Problem."""
    return {
        "title": "Cold-chain vaccine storage",
        "statement": "Keep vaccine vials within 2-8 C during last-mile delivery.",
        "initialVector": ["temperature excursions", "courier handoffs"],
    }


@pytest.fixture
def valid_texts():
    """One complete, valid payload per generatable kind."""
    return {
        DocKind.DS: {
            "data_field": "Storage temperature",
            "units": "C",
            "type": "range",
            "source_refs": ["CIT:who#3"],
            "notes": ["Excursions above 8 C void the lot"],
        },
        DocKind.SP: {
            "step": "Pre-condition cool boxes",
            "purpose": "Stabilize box interior before loading",
            "inputs": ["cool box", "ice packs"],
            "outputs": ["conditioned box"],
            "preconditions": ["ice packs frozen 24h"],
            "postconditions": ["interior at 5 C"],
            "refs": ["CIT:who#7"],
        },
        DocKind.X: {
            "heading": "Handoff discipline",
            "narrative": "Every courier handoff is logged with a sensor reading.",
            "precedents": [],
            "successors": [],
            "delta_summary": "",
            "refs": ["CIT:cdc#2"],
        },
        DocKind.Z: {
            "item": "Probe reading at every handoff",
            "rationale": "Detect excursions early",
            "acceptance_criteria": "Reading logged within 2 minutes",
            "evidence": ["CIT:cdc#2"],
            "severity": "high",
        },
        DocKind.M: {
            "statement": "Use pre-conditioned boxes with logged handoff sensors.",
            "justification": "Covers the two dominant excursion causes.",
            "trace_back": ["CIT:who#3", "CIT:cdc#2"],
            "residual_risk": [],
        },
    }


@pytest.fixture
def triple_for(valid_texts):
    """Factory for a valid Triple of a given kind, with optional text overrides."""

    def _make(kind, **overrides):
        return {
            "text": {**valid_texts[kind], **overrides},
            "terms_used": ["excursion"],
            "warnings": [],
        }

    return _make


@pytest.fixture
def mock_config():
    """Patch the config singleton with test-friendly values."""
    test_config = {
        "provider": "anthropic",
        "model": "test-model",
        "draft_temperature": 0.7,
        "final_temperature": 0.5,
        "retrieval_url": "",
        "retrieval_timeout": 5.0,
        "retrieval_top_k": 12,
        "max_rounds": 3,
        "produce_max_retries": 0,
        "retry_wait_min": 0,
        "retry_wait_max": 0,
        "output_path": "./output/run.json",
    }
    with patch("chirality.config._config", test_config):
        yield test_config


@pytest.fixture
def fake_backend():
    """Factory: fake_backend([payload_or_exception, ...])."""
    return FakeBackend


@pytest.fixture
def fake_retriever():
    """Factory: fake_retriever(evidence=[...], error=None)."""
    return FakeRetriever
