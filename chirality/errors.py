"""Failure taxonomy for the document pipeline.

None of these escape ``produce``; they exist so each stage can say what went
wrong and the orchestrator can turn it into a fallback warning.
"""


class ChiralityError(Exception):
    """Base class for pipeline failures."""


class RetrievalUnavailable(ChiralityError):
    """The retrieval service could not be reached or returned garbage."""


class GenerationFailure(ChiralityError):
    """A backend call failed on the draft or finalize pass."""

    def __init__(self, stage: str, cause: BaseException):
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage} pass failed: {cause}")


class SchemaViolation(ChiralityError):
    """The normalized payload does not match its kind's contract."""

    def __init__(self, kind: str, issues: list[str]):
        self.kind = kind
        self.issues = issues
        super().__init__(f"Triple shape invalid for {kind}: {'; '.join(issues)}")
