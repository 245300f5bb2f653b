"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - pdf_bytes: Minimal PDF content
    - sample_analysis: A complete AnalysisResult
    - analysis_json: The same analysis as provider JSON
    - fake_gateway: Scripted AIGateway
    - controller: ViewController wired to the fake gateway
"""

import json

import pytest

from quantscholar.models.analysis import AnalysisResult
from quantscholar.session.controller import ViewController
from tests.fakes import FakeGateway

SAMPLE_ANALYSIS = {
    "title": "Auctions with Behavioral Bidders",
    "authors": ["A. Author", "B. Author"],
    "journal_fit": "Marketing Science: a mechanism-design contribution with managerial bite.",
    "research_question": "How should a seller design an auction when bidders are loss averse?",
    "methodology": {
        "type": "Game Theory",
        "key_assumptions": ["Independent private values", "Reference-dependent utility"],
        "model_setup": "One seller, n bidders with loss-averse preferences.",
    },
    "key_findings": ["Proposition 1: reserve prices fall with loss aversion."],
    "theoretical_contribution": "Shows revenue equivalence fails under loss aversion.",
    "managerial_implications": "Sellers should lower reserve prices.",
    "critique": {
        "strengths": ["Clean closed-form equilibrium"],
        "weaknesses": ["Symmetric bidders only"],
        "reviewer_perspective": "Is loss aversion identified in the field data?",
    },
}


@pytest.fixture
def pdf_bytes() -> bytes:
    """Return minimal PDF bytes; nothing parses them."""
    return b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\n%%EOF\n"


@pytest.fixture
def analysis_json() -> str:
    """Return the sample analysis serialized as the provider would."""
    return json.dumps(SAMPLE_ANALYSIS)


@pytest.fixture
def sample_analysis() -> AnalysisResult:
    """Return a complete analysis result."""
    return AnalysisResult.model_validate(SAMPLE_ANALYSIS)


@pytest.fixture
def fake_gateway(sample_analysis: AnalysisResult) -> FakeGateway:
    """Gateway that succeeds and streams a two-fragment reply."""
    return FakeGateway(analysis=sample_analysis, fragments=["The intuition", " is that..."])


@pytest.fixture
def controller(fake_gateway: FakeGateway) -> ViewController:
    """Controller in the UPLOAD state."""
    return ViewController(fake_gateway)
