"""Pytest configuration and shared fixtures for tsreview tests."""

import textwrap
from pathlib import Path

import pytest

from tsreview.analyzer import analyze
from tsreview.checks import run_rules
from tsreview.config import Config

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def clean_project():
    """Path to the clean TypeScript/React project fixture."""
    return FIXTURES_DIR / "clean-project"


@pytest.fixture
def problematic_project():
    """Path to the problematic project fixture."""
    return FIXTURES_DIR / "problematic-project"


@pytest.fixture
def make_unit():
    """Build a SourceUnit from inline (dedented) source text."""
    def _make(text: str, filename: str = "sample.ts"):
        return analyze(Path(filename), textwrap.dedent(text), rel=filename)
    return _make


@pytest.fixture
def review_source(make_unit):
    """Run every rule on inline source text and return the findings."""
    def _review(text: str, filename: str = "sample.ts", **settings):
        return run_rules(make_unit(text, filename), Config(**settings))
    return _review
