"""
Lexicon — Immutable word lists shared by scoring and taxonomy

Every hardcoded vocabulary the heuristics depend on lives here:
- Stop words (query-term extraction, term learning)
- Technical term categories (learning cascade, technical term detection)
- Sentiment words (tuning the sentiment lexicon)
- Difficulty markers (complexity assessment)
- Platform terms

A Lexicon is built once and passed into RelevanceScorer and TermTaxonomy.
Deployments customize it with extend(), which returns a new instance.
Category lookups are frozenset membership, never list scans.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional


STOP_WORDS = frozenset({
    "a", "about", "above", "after", "again", "against", "all", "also", "am",
    "among", "an", "and", "any", "are", "as", "at", "be", "because", "been",
    "before", "being", "below", "between", "both", "but", "by", "can",
    "could", "did", "do", "does", "doing", "down", "during", "each", "either",
    "else", "ever", "few", "for", "from", "further", "get", "got", "had",
    "has", "have", "having", "he", "her", "here", "hers", "herself", "him",
    "himself", "his", "how", "however", "i", "if", "in", "into", "is", "it",
    "its", "itself", "just", "let", "like", "may", "me", "might", "more",
    "most", "must", "my", "myself", "neither", "no", "nor", "not", "now",
    "of", "off", "often", "on", "once", "only", "or", "other", "our", "ours",
    "ourselves", "out", "over", "own", "same", "shall", "she", "should", "so",
    "some", "such", "than", "that", "the", "their", "theirs", "them",
    "themselves", "then", "there", "these", "they", "this", "those",
    "through", "to", "too", "under", "until", "up", "upon", "us", "very",
    "was", "we", "were", "what", "when", "where", "whether", "which", "while",
    "who", "whom", "why", "will", "with", "within", "without", "would", "yet",
    "you", "your", "yours", "yourself", "yourselves",
})

# Technical categories, checked by the learning cascade
LANGUAGES = frozenset({
    "javascript", "typescript", "python", "java", "csharp", "cpp", "rust",
    "go", "php", "ruby", "swift", "kotlin", "dart", "scala", "r", "matlab",
    "elixir", "erlang", "haskell", "clojure", "julia", "lua", "perl", "zig",
    "ocaml", "fsharp", "groovy", "fortran", "cobol", "solidity",
})

FRAMEWORKS = frozenset({
    "react", "vue", "angular", "svelte", "node", "express", "fastapi",
    "django", "flask", "spring", "laravel", "rails", "next", "nuxt", "remix",
    "astro", "nestjs", "gin", "phoenix", "symfony", "quarkus", "tornado",
    "starlette", "pyramid", "ember", "backbone", "solid", "qwik",
})

CONCEPTS = frozenset({
    "api", "database", "framework", "library", "service", "component",
    "algorithm", "datastructure", "encryption", "authentication",
    "authorization", "middleware", "orm", "crud", "rest", "graphql",
    "websocket", "http", "tcp", "udp", "ssl", "tls", "oauth", "jwt", "json",
    "xml", "yaml",
})

DATA_TERMS = frozenset({
    "sql", "nosql", "mongodb", "postgresql", "mysql", "redis",
    "elasticsearch", "kafka", "rabbitmq", "cache", "cdn", "aws", "azure",
    "gcp", "blob", "queue", "stream", "etl", "data-pipeline", "analytics",
})

ARCHITECTURE_TERMS = frozenset({
    "microservices", "monolith", "serverless", "container", "docker",
    "kubernetes", "mvc", "mvvm", "mvp", "hexagonal", "event-driven",
    "pub-sub", "observer", "singleton", "factory", "strategy", "decorator",
    "adapter", "facade", "proxy", "command", "repository", "unit-of-work",
})

PRACTICES = frozenset({
    "testing", "debugging", "profiling", "optimization", "refactoring",
    "ci-cd", "devops", "agile", "scrum", "kanban", "tdd", "bdd",
    "code-review", "pair-programming", "version-control", "git",
    "deployment", "monitoring", "logging",
})

FRONTEND_TERMS = frozenset({
    "html", "css", "sass", "less", "webpack", "vite", "babel", "eslint",
    "prettier", "state", "props", "hooks", "context", "redux", "zustand",
    "router", "spa", "pwa", "ssr", "ssg", "responsive", "accessibility",
})

BACKEND_TERMS = frozenset({
    "server", "endpoint", "controller", "model", "entity", "migration",
    "seeder", "validation", "sanitization", "rate-limiting", "throttling",
    "circuit-breaker", "load-balancer",
})

COMPLEX_TERMS = frozenset({
    "algorithm", "optimization", "architecture", "scalability",
    "concurrency", "asynchronous", "microservices", "distributed",
    "polymorphism", "abstraction", "dependency-injection",
    "inversion-of-control", "aspect-oriented", "functional-programming",
    "reactive", "event-sourcing", "cqrs",
})

POSITIVE_WORDS = frozenset({
    "good", "great", "excellent", "best", "effective", "useful", "amazing",
    "fantastic", "outstanding", "perfect", "awesome", "brilliant", "superb",
    "wonderful", "impressive", "remarkable", "exceptional", "innovative",
})

NEGATIVE_WORDS = frozenset({
    "bad", "poor", "difficult", "problem", "issue", "error", "terrible",
    "awful", "horrible", "worst", "useless", "broken", "failed", "wrong",
    "confusing", "frustrating", "annoying", "disappointing", "problematic",
})

DIFFICULTY_MARKERS = {
    "beginner": frozenset({
        "beginner", "intro", "introduction", "basics", "fundamentals",
        "getting-started", "tutorial", "guide", "learn", "first", "start",
        "simple", "easy", "overview", "primer", "crash-course", "hello-world",
    }),
    "intermediate": frozenset({
        "intermediate", "practical", "hands-on", "building", "creating",
        "developing", "implementing", "working-with", "using", "applying",
        "function", "method", "technique", "approach", "pattern", "example",
    }),
    "advanced": frozenset({
        "advanced", "expert", "deep-dive", "best-practices", "optimization",
        "performance", "scaling", "enterprise", "production", "professional",
        "complex", "sophisticated", "architecture", "design-patterns",
        "mastery",
    }),
}

PLATFORM_TERMS = {
    "reddit": frozenset({
        "discussion", "question", "answer", "community", "thread", "post",
        "comment", "subreddit", "upvote", "karma", "ama",
    }),
    "youtube": frozenset({
        "video", "demo", "walkthrough", "explanation", "review", "channel",
        "playlist", "subscribe", "live",
    }),
    "github": frozenset({
        "repository", "repo", "code", "source", "project", "commit",
        "pull-request", "issue", "fork", "star", "clone", "branch", "merge",
        "release",
    }),
    "web": frozenset({
        "website", "blog", "article", "documentation", "reference", "manual",
        "wiki", "page", "site", "portal", "platform", "resource",
    }),
}

# Lexicon category -> taxonomy domain it evidences
CATEGORY_DOMAINS = MappingProxyType({
    "languages": "programming",
    "frameworks": "programming",
    "concepts": "software-engineering",
    "architecture": "software-engineering",
    "practices": "software-engineering",
    "data": "data-science",
    "frontend": "web-development",
    "backend": "web-development",
})


def _freeze(mapping: Mapping[str, Iterable[str]]) -> Mapping[str, FrozenSet[str]]:
    return MappingProxyType({k: frozenset(t.lower() for t in v) for k, v in mapping.items()})


@dataclass(frozen=True)
class Lexicon:
    """Immutable collection of word lists keyed by category."""
    stop_words: FrozenSet[str] = STOP_WORDS
    categories: Mapping[str, FrozenSet[str]] = field(default_factory=lambda: _freeze({
        "languages": LANGUAGES,
        "frameworks": FRAMEWORKS,
        "concepts": CONCEPTS,
        "data": DATA_TERMS,
        "architecture": ARCHITECTURE_TERMS,
        "practices": PRACTICES,
        "frontend": FRONTEND_TERMS,
        "backend": BACKEND_TERMS,
        "complex": COMPLEX_TERMS,
    }))
    positive_words: FrozenSet[str] = POSITIVE_WORDS
    negative_words: FrozenSet[str] = NEGATIVE_WORDS
    difficulty: Mapping[str, FrozenSet[str]] = field(default_factory=lambda: _freeze(DIFFICULTY_MARKERS))
    platforms: Mapping[str, FrozenSet[str]] = field(default_factory=lambda: _freeze(PLATFORM_TERMS))

    def is_stop_word(self, token: str) -> bool:
        return token.lower() in self.stop_words

    def terms(self, category: str) -> FrozenSet[str]:
        """Terms of one category (empty if unknown)."""
        return self.categories.get(category, frozenset())

    def in_category(self, term: str, category: str) -> bool:
        return term.lower() in self.terms(category)

    def categories_for(self, term: str) -> List[str]:
        """All categories containing the term."""
        term_lower = term.lower()
        return [name for name, terms in self.categories.items() if term_lower in terms]

    def domains_for(self, term: str) -> List[str]:
        """Taxonomy domains the term's categories point to, deduplicated."""
        domains: List[str] = []
        for category in self.categories_for(term):
            domain = CATEGORY_DOMAINS.get(category)
            if domain and domain not in domains:
                domains.append(domain)
        return domains

    def technical_terms(self) -> FrozenSet[str]:
        """Union of every technical category (complex markers excluded)."""
        result: set = set()
        for name, terms in self.categories.items():
            if name != "complex":
                result |= terms
        return frozenset(result)

    def extend(
        self,
        stop_words: Optional[Iterable[str]] = None,
        categories: Optional[Mapping[str, Iterable[str]]] = None,
        positive_words: Optional[Iterable[str]] = None,
        negative_words: Optional[Iterable[str]] = None,
    ) -> "Lexicon":
        """
        Return a new Lexicon with extra words merged in.

        Unknown category names create new categories.
        """
        merged: Dict[str, FrozenSet[str]] = dict(self.categories)
        for name, extra in (categories or {}).items():
            merged[name] = merged.get(name, frozenset()) | {t.lower() for t in extra}

        return replace(
            self,
            stop_words=self.stop_words | {w.lower() for w in (stop_words or ())},
            categories=MappingProxyType(merged),
            positive_words=self.positive_words | {w.lower() for w in (positive_words or ())},
            negative_words=self.negative_words | {w.lower() for w in (negative_words or ())},
        )


DEFAULT_LEXICON = Lexicon()
