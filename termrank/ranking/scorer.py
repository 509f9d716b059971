"""
Scorer — Relevance of discovered content against a search query

Six heuristic factors, each in [0, 1], combined by weighted sum:

  title_match         query terms in the title (substring, partial word,
                      similarity, stem overlap)
  content_match       term density in the body (counts, TF-IDF, concepts)
  source_reliability  prior per content source
  recency             age bands of metadata['publish_date']
  popularity          views, else score, else comments
  content_quality     length, title, tags, url, sentiment, readability,
                      entity density

Fail-soft: a factor that raises counts as 0; a score that raises
becomes ScoringConfig.degraded_score. Nothing propagates to callers.

A scorer holds no per-call state and can be shared by concurrent calls.
"""

import asyncio
import logging
import math
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Any, Callable, Iterable, List, Optional, Sequence

from ..config import ScoringConfig
from ..core.lexicon import Lexicon, DEFAULT_LEXICON
from ..core.models import (
    ContentCandidate,
    ContentSource,
    RankedCandidate,
    RelevanceFactors,
    ScoringOptions,
    clamp,
    utc_now,
)
from ..core.nlp import TextAnalyzer, build_corpus, tfidf
from ..core.tokenizer import (
    count_words,
    extract_query_terms,
    split_sentences,
    stem,
    stem_all,
    tokenize_words,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Factor Tables
# =============================================================================

SOURCE_RELIABILITY = {
    ContentSource.DOCUMENTATION.value: 0.95,
    ContentSource.ACADEMIC.value: 0.90,
    ContentSource.GITHUB.value: 0.85,
    ContentSource.STACKOVERFLOW.value: 0.80,
    ContentSource.LOCAL.value: 0.80,
    ContentSource.BLOG.value: 0.75,
    ContentSource.TUTORIAL.value: 0.70,
    ContentSource.VIDEO.value: 0.65,
    ContentSource.FORUM.value: 0.60,
    ContentSource.WEB.value: 0.50,
}
DEFAULT_RELIABILITY = 0.5
PREFERRED_SOURCE_BOOST = 1.2

# (max age in days, score), checked in order
RECENCY_BANDS = ((7, 1.0), (30, 0.9), (90, 0.8), (365, 0.6))
STALE_SCORE = 0.4
UNKNOWN_RECENCY = 0.5

VIEWS_SATURATION_LOG = 6.0   # 1,000,000 views -> 1.0
SCORE_SATURATION = 100.0
COMMENTS_SATURATION = 50.0
UNKNOWN_POPULARITY = 0.5


def source_key(source: Any) -> str:
    """Normalized string form of a ContentSource or plain string."""
    if isinstance(source, ContentSource):
        return source.value
    return str(source or "").strip().lower()


def _number(value: Any) -> Optional[float]:
    """Finite numeric value, or None for anything else (bools included)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def _parse_date(value: Any) -> Optional[datetime]:
    """Aware datetime from datetime, date or ISO-8601 string. Naive means UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class RelevanceScorer:
    """
    Scores content candidates against a query.

    Usage:
        scorer = RelevanceScorer()
        score = await scorer.score(candidate, "react server components")
        ranked = await scorer.score_and_rank(candidates, query)
        factors = await scorer.explain(candidate, query)
    """

    def __init__(
        self,
        lexicon: Optional[Lexicon] = None,
        config: Optional[ScoringConfig] = None,
        corpus: Optional[Iterable[str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            lexicon: Word lists (default: DEFAULT_LEXICON)
            config: Weights and degraded score (default: ScoringConfig())
            corpus: Background documents for TF-IDF, tokenized once
            clock: Returns the current aware datetime (default: utc_now)
        """
        self.lexicon = lexicon or DEFAULT_LEXICON
        self.config = config or ScoringConfig()
        self.analyzer = TextAnalyzer(self.lexicon)
        self.corpus = build_corpus(corpus) if corpus else ()
        self._clock = clock or utc_now

    # =========================================================================
    # Public API
    # =========================================================================

    def extract_query_terms(self, query: str) -> List[str]:
        return extract_query_terms(query, self.lexicon)

    async def score(
        self,
        candidate: ContentCandidate,
        query: str,
        options: Optional[ScoringOptions] = None,
    ) -> float:
        """
        Relevance of a candidate in [0, 1].

        Returns ScoringConfig.degraded_score if scoring fails.
        """
        options = options or ScoringOptions()
        try:
            weights = self.config.weights.merged(options.weights)
            factors = self._factors(candidate, self._query_terms(query, options), options)
            return clamp(factors.weighted_sum(weights))
        except Exception as e:
            logger.error("Scoring failed for %s: %s", getattr(candidate, "id", "?"), e)
            return self.config.degraded_score

    async def score_and_rank(
        self,
        candidates: Sequence[ContentCandidate],
        query: str,
        options: Optional[ScoringOptions] = None,
    ) -> List[RankedCandidate]:
        """
        Score all candidates concurrently, drop those under min_score,
        and sort by descending score. Ties keep input order.
        """
        options = options or ScoringOptions()
        options = replace(options, query_terms=self._query_terms(query, options))

        scores = await asyncio.gather(*(self.score(c, query, options) for c in candidates))

        ranked = [RankedCandidate(candidate=c, score=s) for c, s in zip(candidates, scores)]
        if options.min_score is not None:
            ranked = [r for r in ranked if r.score >= options.min_score]

        logger.debug("Ranked %d of %d candidates for %r", len(ranked), len(candidates), query)
        return sorted(ranked, key=lambda r: r.score, reverse=True)

    async def explain(
        self,
        candidate: ContentCandidate,
        query: str,
        options: Optional[ScoringOptions] = None,
    ) -> RelevanceFactors:
        """Per-factor breakdown of a candidate's score."""
        options = options or ScoringOptions()
        try:
            return self._factors(candidate, self._query_terms(query, options), options)
        except Exception as e:
            logger.error("Explaining failed for %s: %s", getattr(candidate, "id", "?"), e)
            return RelevanceFactors()

    # =========================================================================
    # Factors
    # =========================================================================

    def _query_terms(self, query: str, options: ScoringOptions) -> List[str]:
        if options.query_terms is not None:
            return list(options.query_terms)
        return self.extract_query_terms(query)

    def _factors(self, candidate: ContentCandidate, terms: List[str], options: ScoringOptions) -> RelevanceFactors:
        title = candidate.title or ""
        content = candidate.content or ""
        metadata = candidate.metadata if isinstance(candidate.metadata, dict) else {}

        return RelevanceFactors(
            title_match=self._safe("title_match", self._title_match, title, terms),
            content_match=self._safe("content_match", self._content_match, content, terms),
            source_reliability=self._safe(
                "source_reliability", self._source_reliability, candidate.source, options.preferred_sources
            ),
            recency=self._safe("recency", self._recency, metadata),
            popularity=self._safe("popularity", self._popularity, metadata),
            content_quality=self._safe("content_quality", self._content_quality, candidate),
        )

    def _safe(self, name: str, factor: Callable[..., float], *args) -> float:
        try:
            return clamp(factor(*args))
        except Exception as e:
            logger.debug("Factor %s failed: %s", name, e)
            return 0.0

    def _title_match(self, title: str, terms: List[str]) -> float:
        title_lower = title.lower()
        words = title_lower.split()
        score = 0.0

        for term in terms:
            term = term.lower()
            if term in title_lower:
                score += 1.0
            partial = sum(1 for w in words if term in w or w in term)
            score += partial * 0.5

        score += self.analyzer.similarity(title, " ".join(terms)) * 0.8
        score += self._stem_overlap(title, terms) * 0.6

        return score / max(len(terms), 1)

    def _stem_overlap(self, text: str, terms: List[str]) -> float:
        """Fraction of terms whose stem appears among the text's stems."""
        if not terms:
            return 0.0
        text_stems = set(stem_all(tokenize_words(text)))
        matches = sum(1 for t in terms if t in text_stems or stem(t) in text_stems)
        return matches / len(terms)

    def _content_match(self, content: str, terms: List[str]) -> float:
        content_lower = content.lower()
        word_count = max(count_words(content), 1)
        score = 0.0

        for term in terms:
            score += content_lower.count(term.lower())

        score += self._mean_tfidf(content, terms) * word_count * 0.5
        score += self._concept_overlap(content, terms) * 2

        density = score / (word_count * max(len(terms), 1))
        return density * 100

    def _mean_tfidf(self, content: str, terms: List[str]) -> float:
        if not terms:
            return 0.0
        document = stem_all(tokenize_words(content))
        total = sum(tfidf(stem(t), document, self.corpus) for t in terms)
        return total / len(terms)

    def _concept_overlap(self, content: str, terms: List[str]) -> float:
        if not terms:
            return 0.0
        concepts = self.analyzer.concepts(content)
        matches = 0.0
        for term in terms:
            term = term.lower()
            if term in concepts:
                matches += 1.0
            partial = sum(1 for c in concepts if term in c or c in term)
            matches += partial * 0.5
        return matches / len(terms)

    def _source_reliability(self, source: Any, preferred: Sequence[Any]) -> float:
        key = source_key(source)
        score = SOURCE_RELIABILITY.get(key, DEFAULT_RELIABILITY)
        if key in {source_key(p) for p in preferred or ()}:
            score = min(1.0, score * PREFERRED_SOURCE_BOOST)
        return score

    def _recency(self, metadata: dict) -> float:
        published = _parse_date(metadata.get("publish_date"))
        if published is None:
            return UNKNOWN_RECENCY

        age_days = (self._clock() - published).total_seconds() / 86400
        for max_days, score in RECENCY_BANDS:
            if age_days <= max_days:
                return score
        return STALE_SCORE

    def _popularity(self, metadata: dict) -> float:
        views = _number(metadata.get("view_count"))
        if views is not None and views > 0:
            return min(1.0, math.log10(views) / VIEWS_SATURATION_LOG)

        score = _number(metadata.get("score"))
        if score is not None and score > 0:
            return min(1.0, score / SCORE_SATURATION)

        comments = _number(metadata.get("comment_count"))
        if comments is not None and comments > 0:
            return min(1.0, comments / COMMENTS_SATURATION)

        return UNKNOWN_POPULARITY

    def _content_quality(self, candidate: ContentCandidate) -> float:
        content = candidate.content or ""
        quality = 0.5

        word_count = count_words(content)
        if 100 <= word_count <= 2000:
            quality += 0.2
        elif 2000 < word_count <= 5000:
            quality += 0.1

        title_words = count_words(candidate.title)
        if 3 <= title_words <= 15:
            quality += 0.1

        if candidate.effective_tags:
            quality += 0.1

        url = candidate.effective_url
        if url and url.startswith("http"):
            quality += 0.1

        sentiment = self.analyzer.sentiment(content)
        if sentiment > 0.1:
            quality += 0.1
        elif sentiment < -0.3:
            quality -= 0.1

        sentences = len(split_sentences(content))
        avg_sentence_length = word_count / max(sentences, 1)
        if 10 <= avg_sentence_length <= 25:
            quality += 0.1

        entity_density = len(self.analyzer.entities(content)) / max(word_count, 1)
        if 0.02 < entity_density < 0.1:
            quality += 0.1

        return clamp(quality)
