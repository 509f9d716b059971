"""
Domains — Seed registry and static vocabulary for the taxonomy

A domain is a named bucket of terms ("programming", "data-science").
The registry below seeds every TermTaxonomy at initialization; more
domains can be added at runtime.

SEED_TERMS is the static bucket: keyed by (domain, category), every
term gets confidence 1.0 and never changes afterwards.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple


# =============================================================================
# Domain Registry
# =============================================================================

@dataclass
class TaxonomyDomain:
    """Specification for a domain."""
    name: str
    description: str = ""
    categories: List[str] = field(default_factory=list)
    keyword_patterns: List[str] = field(default_factory=list)
    confidence_threshold: float = 0.7
    parent_domain: Optional[str] = None
    sub_domains: List[str] = field(default_factory=list)

    def copy(self) -> "TaxonomyDomain":
        return replace(
            self,
            categories=list(self.categories),
            keyword_patterns=list(self.keyword_patterns),
            sub_domains=list(self.sub_domains),
        )


SEED_DOMAINS: Tuple[TaxonomyDomain, ...] = (
    TaxonomyDomain(
        name="programming",
        description="Programming languages, frameworks, and tools",
        categories=["language", "framework", "library", "tool"],
        keyword_patterns=["code", "programming", "development", "syntax"],
        confidence_threshold=0.7,
        sub_domains=["web-development"],
    ),
    TaxonomyDomain(
        name="software-engineering",
        description="Software engineering practices and methodologies",
        categories=["concept", "methodology", "practice", "tool", "architecture"],
        keyword_patterns=["software", "engineering", "architecture", "design"],
        confidence_threshold=0.6,
    ),
    TaxonomyDomain(
        name="data-science",
        description="Data analysis, machine learning, and statistics",
        categories=["analysis", "modeling", "visualization", "statistics", "data"],
        keyword_patterns=["data", "analysis", "machine learning", "statistics"],
        confidence_threshold=0.7,
    ),
    TaxonomyDomain(
        name="web-development",
        description="Web development technologies and practices",
        categories=["frontend", "backend", "fullstack", "protocol"],
        keyword_patterns=["web", "frontend", "backend", "browser"],
        confidence_threshold=0.6,
        parent_domain="programming",
    ),
)


# =============================================================================
# Static Vocabulary
# =============================================================================

SEED_TERMS: Dict[Tuple[str, str], Tuple[str, ...]] = {
    ("programming", "language"): (
        "javascript", "typescript", "python", "java", "csharp", "cpp",
        "rust", "go", "php", "ruby", "swift", "kotlin", "dart", "scala",
        "r", "matlab",
    ),
    ("programming", "framework"): (
        "react", "vue", "angular", "svelte", "node", "express", "fastapi",
        "django", "flask", "spring", "laravel", "rails", "next", "nuxt",
    ),
    ("software-engineering", "concept"): (
        "api", "database", "algorithm", "authentication", "authorization",
        "microservices", "containerization", "ci-cd", "testing", "debugging",
    ),
}


def seed_domains() -> List[TaxonomyDomain]:
    """Fresh copies of the seed registry."""
    return [domain.copy() for domain in SEED_DOMAINS]
