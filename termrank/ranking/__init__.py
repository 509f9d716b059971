"""
Ranking — Relevance scoring of discovered content

- Scorer: six-factor heuristic relevance, batch ranking, breakdowns
"""

from .scorer import RelevanceScorer, SOURCE_RELIABILITY, source_key

__all__ = [
    "RelevanceScorer", "SOURCE_RELIABILITY", "source_key",
]
