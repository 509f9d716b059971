"""
Shared pytest fixtures for the termrank test suite.

Usage in tests:
    async def test_something(taxonomy):
        await taxonomy.learn_from_content("...", make_context())

    async def test_scoring(scorer):
        score = await scorer.score(make_candidate(), "react")
"""

import pytest

from termrank.core.taxonomy import TermTaxonomy
from termrank.ranking.scorer import RelevanceScorer
from tests.factories import fixed_clock, make_candidate


@pytest.fixture
def scorer():
    """RelevanceScorer with a fixed clock (2024-06-01 UTC)."""
    return RelevanceScorer(clock=fixed_clock())


@pytest.fixture
def candidate():
    """The React Server Components tutorial candidate."""
    return make_candidate()


@pytest.fixture
async def taxonomy():
    """Initialized TermTaxonomy with default settings and no validators."""
    taxonomy = TermTaxonomy(clock=fixed_clock())
    await taxonomy.initialize()
    return taxonomy


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep host TERMRANK_* variables out of tests."""
    for key in ("TERMRANK_MIN_CONFIDENCE", "TERMRANK_MAX_LEARNED_TERMS", "TERMRANK_EXTERNAL_VALIDATION"):
        monkeypatch.delenv(key, raising=False)
