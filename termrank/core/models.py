"""
Models — Data structures shared by scoring and taxonomy

Content side:
- ContentCandidate: a discovered item awaiting scoring (single-use)
- ScoringWeights / ScoringOptions: per-call scoring knobs
- RelevanceFactors / RankedCandidate: scoring output

Taxonomy side:
- TaxonomyTerm: a term in one bucket (static or learned)
- LearningContext: where learned text came from
- ValidationResult: what a validator concluded
- DomainClassification / TaxonomyMetrics: taxonomy output
"""

from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import xxhash


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


# =============================================================================
# Content
# =============================================================================

class ContentSource(str, Enum):
    """Where a candidate was discovered."""
    DOCUMENTATION = "documentation"
    ACADEMIC = "academic"
    GITHUB = "github"
    STACKOVERFLOW = "stackoverflow"
    BLOG = "blog"
    TUTORIAL = "tutorial"
    VIDEO = "video"
    FORUM = "forum"
    WEB = "web"
    LOCAL = "local"


def candidate_id(title: str, url: str = "") -> str:
    """Stable short id for a candidate (xxhash of title + url)."""
    key = f"{title}\x00{url}"
    return xxhash.xxh64(key.encode()).hexdigest()[:12]


@dataclass
class ContentCandidate:
    """
    A discovered content item.

    Metadata keys read by the scorer (all optional):
        publish_date, view_count, score, comment_count, tags, url
    """
    title: str
    content: str
    source: Union[ContentSource, str] = ContentSource.WEB
    metadata: Dict[str, Any] = field(default_factory=dict)
    url: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    id: str = ""

    def __post_init__(self):
        if not self.id:
            self.id = candidate_id(self.title or "", self.effective_url or "")

    @property
    def effective_url(self) -> Optional[str]:
        """Top-level url, falling back to metadata['url']."""
        if self.url:
            return self.url
        url = (self.metadata or {}).get("url")
        return url if isinstance(url, str) else None

    @property
    def effective_tags(self) -> List[str]:
        """Top-level tags, falling back to metadata['tags']."""
        if self.tags:
            return list(self.tags)
        tags = (self.metadata or {}).get("tags")
        if isinstance(tags, (list, tuple, set)):
            return list(tags)
        return []


@dataclass
class ScoringWeights:
    """Factor coefficients. They need not sum to 1."""
    title_match: float = 0.30
    content_match: float = 0.25
    source_reliability: float = 0.15
    recency: float = 0.10
    popularity: float = 0.10
    content_quality: float = 0.10

    def merged(self, overrides: Union["ScoringWeights", Mapping[str, float], None]) -> "ScoringWeights":
        """
        Apply a (possibly partial) override.

        Unknown keys raise TypeError; the scorer turns that into
        a degraded score.
        """
        if overrides is None:
            return self
        if isinstance(overrides, ScoringWeights):
            return overrides
        return replace(self, **dict(overrides))

    def to_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class RelevanceFactors:
    """The six sub-scores, each in [0, 1]."""
    title_match: float = 0.0
    content_match: float = 0.0
    source_reliability: float = 0.0
    recency: float = 0.0
    popularity: float = 0.0
    content_quality: float = 0.0

    def weighted_sum(self, weights: ScoringWeights) -> float:
        return sum(getattr(self, f.name) * getattr(weights, f.name) for f in fields(self))

    def to_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class ScoringOptions:
    """Per-call scoring options."""
    weights: Union[ScoringWeights, Mapping[str, float], None] = None
    query_terms: Optional[Sequence[str]] = None
    preferred_sources: Sequence[Union[ContentSource, str]] = ()
    min_score: Optional[float] = None


@dataclass
class RankedCandidate:
    """A candidate with its relevance score."""
    candidate: ContentCandidate
    score: float


# =============================================================================
# Taxonomy
# =============================================================================

class TermSource(str, Enum):
    """
    Lifecycle of a taxonomy term.

    STATIC is terminal. LEARNED becomes VALIDATED only through a
    successful validation. EXTERNAL is reserved for provider
    integrations and only arrives through import.
    """
    STATIC = "static"
    LEARNED = "learned"
    EXTERNAL = "external"
    VALIDATED = "validated"


@dataclass
class TaxonomyTerm:
    """A vocabulary term classified into a domain."""
    term: str
    domain: str
    category: str
    confidence: float
    source: TermSource = TermSource.LEARNED
    frequency: int = 0
    last_seen: datetime = field(default_factory=utc_now)
    related_terms: List[str] = field(default_factory=list)
    aliases: List[str] = field(default_factory=list)
    contexts: List[str] = field(default_factory=list)
    difficulty: Optional[str] = None
    platform_usage: Dict[str, int] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.source, TermSource):
            self.source = TermSource(self.source)

    def copy(self) -> "TaxonomyTerm":
        return replace(
            self,
            related_terms=list(self.related_terms),
            aliases=list(self.aliases),
            contexts=list(self.contexts),
            platform_usage=dict(self.platform_usage),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Plain mapping form (datetimes as ISO strings)."""
        return {
            "term": self.term,
            "domain": self.domain,
            "category": self.category,
            "confidence": self.confidence,
            "source": self.source.value,
            "frequency": self.frequency,
            "last_seen": self.last_seen.isoformat(),
            "related_terms": list(self.related_terms),
            "aliases": list(self.aliases),
            "contexts": list(self.contexts),
            "difficulty": self.difficulty,
            "platform_usage": dict(self.platform_usage),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TaxonomyTerm":
        """Create from a mapping produced by to_dict()."""
        last_seen = data.get("last_seen")
        if isinstance(last_seen, str):
            try:
                last_seen = datetime.fromisoformat(last_seen)
            except ValueError:
                last_seen = None
        if not isinstance(last_seen, datetime):
            last_seen = utc_now()

        return cls(
            term=data["term"],
            domain=data.get("domain", "general"),
            category=data.get("category", "unknown"),
            confidence=float(data.get("confidence", 0.0)),
            source=TermSource(data.get("source", TermSource.LEARNED.value)),
            frequency=int(data.get("frequency", 0)),
            last_seen=last_seen,
            related_terms=list(data.get("related_terms") or []),
            aliases=list(data.get("aliases") or []),
            contexts=list(data.get("contexts") or []),
            difficulty=data.get("difficulty"),
            platform_usage=dict(data.get("platform_usage") or {}),
        )


@dataclass
class LearningContext:
    """
    Provenance of text handed to learn_from_content.

    content_type: article | documentation | code | discussion | tutorial | reference
    platform: reddit | youtube | github | web | stackoverflow | medium
    user_feedback: positive | negative | neutral
    """
    content_source: str
    content_type: str
    platform: str
    user_feedback: Optional[str] = None
    language: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ValidationResult:
    """Outcome of validating a term against a domain."""
    is_valid: bool
    confidence: float
    source: str
    suggestions: List[str] = field(default_factory=list)
    related_terms: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class DomainClassification:
    """Probability that text belongs to a domain."""
    domain: str
    confidence: float


@dataclass
class TaxonomyMetrics:
    """Snapshot of taxonomy health."""
    total_terms: int = 0
    terms_by_source: Dict[str, int] = field(default_factory=dict)
    terms_by_domain: Dict[str, int] = field(default_factory=dict)
    learning_accuracy: float = 0.0
    validation_success_rate: float = 0.0
    top_terms: List[Dict[str, Any]] = field(default_factory=list)
