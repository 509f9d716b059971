"""
Configuration — Centralized settings management

Config hierarchy (highest to lowest priority):
  1. Environment variables
  2. Project config (.termrank/config.yaml)
  3. User config (~/.termrank/config.yaml)
  4. Defaults

Sections:
  scoring   — factor weights and the degraded score
  learning  — taxonomy learning thresholds and validation
  lexicon   — extra words merged into the default lexicon
"""

import logging
import os
import yaml
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Optional, Dict, Any, List

from .core.lexicon import Lexicon, DEFAULT_LEXICON
from .core.models import ScoringWeights


logger = logging.getLogger(__name__)

DEFAULT_EXCLUDE_TERMS = ["the", "and", "or", "but", "is", "are", "was", "were"]

# Environment variable -> (section, setting)
ENV_OVERRIDES = {
    "TERMRANK_MIN_CONFIDENCE": ("learning", "min_confidence"),
    "TERMRANK_MAX_LEARNED_TERMS": ("learning", "max_learned_terms"),
    "TERMRANK_EXTERNAL_VALIDATION": ("learning", "enable_external_validation"),
}


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('true', '1', 'yes', 'on')


def _unit_interval_error(name: str, value: Any) -> Optional[str]:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return f"{name} must be a number, got {value!r}"
    if not 0.0 <= value <= 1.0:
        return f"{name} must be between 0 and 1, got {value}"
    return None


@dataclass
class ScoringConfig:
    """Relevance scoring settings."""
    weights: ScoringWeights = field(default_factory=ScoringWeights)
    degraded_score: float = 0.1  # returned when scoring a candidate fails

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        for name, value in self.weights.to_dict().items():
            if not isinstance(value, (int, float)) or isinstance(value, bool) or value < 0:
                return f"Weight '{name}' must be a non-negative number, got {value!r}"
        return _unit_interval_error("degraded_score", self.degraded_score)


@dataclass
class LearningConfig:
    """Taxonomy learning settings."""
    min_confidence: float = 0.7
    max_learned_terms: int = 1000
    enable_external_validation: bool = True
    exclude_terms: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_TERMS))
    validation_bump: float = 0.1
    max_learned_confidence: float = 0.95

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        for name in ("min_confidence", "validation_bump", "max_learned_confidence"):
            error = _unit_interval_error(name, getattr(self, name))
            if error:
                return error
        if not isinstance(self.max_learned_terms, int) or self.max_learned_terms < 0:
            return f"max_learned_terms must be a non-negative integer, got {self.max_learned_terms!r}"
        return None

    def merged(self, **changes) -> "LearningConfig":
        """
        Copy with changes applied.

        Raises:
            TypeError: on unknown setting names
        """
        return replace(self, **changes)


@dataclass
class LexiconConfig:
    """Deployment-specific additions to the default lexicon."""
    extra_stop_words: List[str] = field(default_factory=list)
    extra_terms: Dict[str, List[str]] = field(default_factory=dict)

    def build(self, base: Optional[Lexicon] = None) -> Lexicon:
        """Lexicon with the extra words merged in."""
        base = base or DEFAULT_LEXICON
        if not self.extra_stop_words and not self.extra_terms:
            return base
        return base.extend(stop_words=self.extra_stop_words, categories=self.extra_terms)


@dataclass
class Config:
    """Application configuration."""
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    learning: LearningConfig = field(default_factory=LearningConfig)
    lexicon: LexiconConfig = field(default_factory=LexiconConfig)

    def validate(self) -> Optional[str]:
        return self.scoring.validate() or self.learning.validate()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "scoring": {
                "weights": self.scoring.weights.to_dict(),
                "degraded_score": self.scoring.degraded_score,
            },
            "learning": {
                "min_confidence": self.learning.min_confidence,
                "max_learned_terms": self.learning.max_learned_terms,
                "enable_external_validation": self.learning.enable_external_validation,
                "exclude_terms": list(self.learning.exclude_terms),
                "validation_bump": self.learning.validation_bump,
                "max_learned_confidence": self.learning.max_learned_confidence,
            },
            "lexicon": {
                "extra_stop_words": list(self.lexicon.extra_stop_words),
                "extra_terms": {k: list(v) for k, v in self.lexicon.extra_terms.items()},
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create from dictionary. Unknown keys are ignored."""
        scoring_data = data.get("scoring", {}) or {}
        learning_data = data.get("learning", {}) or {}
        lexicon_data = data.get("lexicon", {}) or {}

        weight_names = {f.name for f in fields(ScoringWeights)}
        weights = {k: float(v) for k, v in (scoring_data.get("weights") or {}).items() if k in weight_names}

        defaults = LearningConfig()
        return cls(
            scoring=ScoringConfig(
                weights=ScoringWeights(**weights),
                degraded_score=float(scoring_data.get("degraded_score", 0.1)),
            ),
            learning=LearningConfig(
                min_confidence=float(learning_data.get("min_confidence", defaults.min_confidence)),
                max_learned_terms=int(learning_data.get("max_learned_terms", defaults.max_learned_terms)),
                enable_external_validation=_parse_bool(
                    learning_data.get("enable_external_validation", defaults.enable_external_validation)
                ),
                exclude_terms=list(learning_data.get("exclude_terms", defaults.exclude_terms)),
                validation_bump=float(learning_data.get("validation_bump", defaults.validation_bump)),
                max_learned_confidence=float(
                    learning_data.get("max_learned_confidence", defaults.max_learned_confidence)
                ),
            ),
            lexicon=LexiconConfig(
                extra_stop_words=list(lexicon_data.get("extra_stop_words") or []),
                extra_terms={k: list(v) for k, v in (lexicon_data.get("extra_terms") or {}).items()},
            ),
        )


class ConfigManager:
    """
    Manages configuration loading and persistence.

    Hierarchy:
      1. Environment variables
      2. Project config (.termrank/config.yaml)
      3. User config (~/.termrank/config.yaml)
      4. Defaults
    """

    PROJECT_CONFIG_DIR = ".termrank"
    PROJECT_CONFIG_FILE = "config.yaml"

    def __init__(self, project_dir: Optional[Path] = None, user_dir: Optional[Path] = None):
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self.user_dir = Path(user_dir) if user_dir else Path.home() / ".termrank"
        self._config: Optional[Config] = None

    @property
    def project_config_path(self) -> Path:
        return self.project_dir / self.PROJECT_CONFIG_DIR / self.PROJECT_CONFIG_FILE

    @property
    def user_config_path(self) -> Path:
        return self.user_dir / "config.yaml"

    def load(self) -> Config:
        """Load configuration from all sources."""
        if self._config is not None:
            return self._config

        config_data: Dict[str, Any] = {}

        # Layer 1: User config
        config_data = self._merge(config_data, self._read_yaml(self.user_config_path))

        # Layer 2: Project config (higher priority)
        config_data = self._merge(config_data, self._read_yaml(self.project_config_path))

        # Layer 3: Environment overrides
        for env_key, (section, setting) in ENV_OVERRIDES.items():
            if os.environ.get(env_key):
                config_data.setdefault(section, {})[setting] = os.environ[env_key]

        try:
            config = Config.from_dict(config_data)
        except (TypeError, ValueError) as e:
            logger.warning("Malformed configuration, using defaults: %s", e)
            config = Config()
        else:
            error = config.validate()
            if error:
                logger.warning("Invalid configuration, using defaults: %s", error)
                config = Config()

        self._config = config
        return self._config

    def _read_yaml(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Ignoring unreadable config %s: %s", path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def save_project(self, config: Config):
        """Save configuration to project config file."""
        self._write(self.project_config_path, config)

    def save_user(self, config: Config):
        """Save configuration to user config file."""
        self._write(self.user_config_path, config)

    def _write(self, path: Path, config: Config):
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            yaml.safe_dump(config.to_dict(), f, default_flow_style=False)
        self._config = config

    def set(self, key: str, value: str, scope: str = "project") -> Optional[str]:
        """
        Set a configuration value.

        Args:
            key: Dot-separated key (e.g., "learning.min_confidence")
            value: Value to set
            scope: "project" or "user"

        Returns:
            Error message or None if successful
        """
        config = self.load()

        parts = key.split(".")
        if len(parts) != 2:
            return f"Invalid key format: {key}. Use 'section.setting' (e.g., 'learning.min_confidence')"

        section, setting = parts

        try:
            if section == "scoring":
                if setting == "degraded_score":
                    scoring = replace(config.scoring, degraded_score=float(value))
                elif setting in config.scoring.weights.to_dict():
                    weights = replace(config.scoring.weights, **{setting: float(value)})
                    scoring = replace(config.scoring, weights=weights)
                else:
                    valid = ", ".join(["degraded_score"] + list(config.scoring.weights.to_dict()))
                    return f"Unknown scoring setting: {setting}. Valid: {valid}"
                error = scoring.validate()
                if error:
                    return error
                config.scoring = scoring

            elif section == "learning":
                if setting in ("min_confidence", "validation_bump", "max_learned_confidence"):
                    learning = config.learning.merged(**{setting: float(value)})
                elif setting == "max_learned_terms":
                    learning = config.learning.merged(max_learned_terms=int(value))
                elif setting == "enable_external_validation":
                    learning = config.learning.merged(enable_external_validation=_parse_bool(value))
                else:
                    return (f"Unknown learning setting: {setting}. Valid: min_confidence, "
                            "max_learned_terms, enable_external_validation, validation_bump, "
                            "max_learned_confidence")
                error = learning.validate()
                if error:
                    return error
                config.learning = learning
            else:
                return f"Unknown section: {section}. Valid: scoring, learning"
        except ValueError:
            return f"Invalid value for {key}: {value!r}"

        if scope == "project":
            self.save_project(config)
        else:
            self.save_user(config)

        return None

    def get(self, key: str) -> Optional[str]:
        """Get a configuration value."""
        data = self.load().to_dict()

        parts = key.split(".")
        if len(parts) != 2:
            return None

        section, setting = parts
        section_data = data.get(section, {})
        if setting in section_data:
            return str(section_data[setting])
        if section == "scoring" and setting in section_data.get("weights", {}):
            return str(section_data["weights"][setting])
        return None

    def _merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dicts, override wins."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value
        return result

    def display(self) -> str:
        """Format config for display."""
        config = self.load()
        weights = config.scoring.weights

        lines = [
            "Configuration:",
            "",
            "Scoring:",
            *(f"  {name}: {value}" for name, value in weights.to_dict().items()),
            f"  degraded_score: {config.scoring.degraded_score}",
            "",
            "Learning:",
            f"  Min confidence: {config.learning.min_confidence}",
            f"  Max learned terms: {config.learning.max_learned_terms}",
            f"  External validation: {config.learning.enable_external_validation}",
            "",
            "Config files:",
            f"  User: {self.user_config_path}",
            f"  Project: {self.project_config_path}",
        ]
        return "\n".join(lines)


# Convenience function
def get_config(project_dir: Optional[Path] = None) -> Config:
    """Load configuration for a project."""
    return ConfigManager(project_dir).load()
