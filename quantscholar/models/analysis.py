"""Structured analysis of an uploaded paper.

The model is the contract for the extraction call: the gateway validates the
raw JSON from the provider against it in strict mode, so values of the wrong
type are refused rather than coerced, and a missing mandatory field fails
the whole analysis.
"""

from pydantic import BaseModel, ConfigDict, Field

_FROZEN = ConfigDict(frozen=True)


class Methodology(BaseModel):
    """How the paper gets its results.

    Attributes:
        type: Framework, e.g. game theory or structural estimation.
        key_assumptions: Modeling assumptions the results hinge on.
        model_setup: Players and the game, in brief.
    """

    model_config = _FROZEN

    type: str = ""
    key_assumptions: list[str] = Field(default_factory=list)
    model_setup: str = ""


class Critique(BaseModel):
    """Referee-style assessment of the paper.

    Attributes:
        strengths: What the paper does well.
        weaknesses: Where a reviewer would push back.
        reviewer_perspective: The critique a tough reviewer would write.
    """

    model_config = _FROZEN

    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    reviewer_perspective: str = ""


class AnalysisResult(BaseModel):
    """Full structured analysis returned by the extraction call.

    ``title``, ``research_question``, ``methodology``,
    ``theoretical_contribution`` and ``critique`` are mandatory. Every other
    field may be empty but is never ``None``.
    """

    model_config = _FROZEN

    title: str
    authors: list[str] = Field(default_factory=list)
    journal_fit: str = ""
    research_question: str
    methodology: Methodology
    key_findings: list[str] = Field(default_factory=list)
    theoretical_contribution: str
    managerial_implications: str = ""
    critique: Critique
