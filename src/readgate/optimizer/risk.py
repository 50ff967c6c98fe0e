"""Pattern-based risk assessment of file content.

Each line is tested against per-category rule tables. A category's score is
the sum of matched weights capped at 25; the risk score is the sum of the
five category scores. Every match is kept for explainability.

Extra rules can be loaded from YAML::

    - category: security
      pattern: "private_key"
      weight: 25
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

import yaml

from readgate.config.constants import FACTOR_MAX, RISK_EXCERPT_CHARS
from readgate.core.errors import ConfigError
from readgate.core.logging import get_logger
from readgate.core.paths import normalize_path
from readgate.optimizer.models import (
    RISK_CATEGORIES,
    RISK_LEVELS,
    RiskAssessment,
    RiskCategory,
    RiskFactors,
    RiskLevel,
    RiskMatch,
)
from readgate.vcs import GitHistory

log = get_logger("risk")


@dataclass(frozen=True, slots=True)
class RiskRule:
    category: RiskCategory
    pattern: re.Pattern[str]
    weight: int

    @classmethod
    def build(cls, category: RiskCategory, pattern: str, weight: int) -> RiskRule:
        return cls(category, re.compile(pattern, re.IGNORECASE), weight)


_RULE_SOURCES: dict[RiskCategory, tuple[tuple[str, int], ...]] = {
    "security": (
        (r"password|passwd|secret|token|apikey|api_key", 25),
        (r"auth|authenticate|authorize|credential", 20),
        (r"crypto|encrypt|decrypt|hash|bcrypt|jwt", 20),
        (r"\beval\s*\(|\bexec\s*\(|Function\s*\(", 25),
        (r"innerHTML|outerHTML|document\.write", 15),
        (r"sql|query.*\$|query.*\+", 20),
        (r"sanitize|escape|validate|xss|csrf", 10),
    ),
    "performance": (
        (r"\.query\(|\.execute\(|\.findAll\(|\.find\(", 15),
        (r"for\s*\(.*\.length|while\s*\(", 10),
        (r"async.*await.*for|Promise\.all", 10),
        (r"setTimeout|setInterval|requestAnimationFrame", 5),
        (r"cache|memoize|useMemo|useCallback", 5),
        (r"lazy|defer|prefetch|preload", 5),
    ),
    "complexity": (
        (r"if.*if.*if|else.*else.*else", 10),
        (r"switch\s*\([^)]+\)\s*\{(?:[^}]*case[^}]*){5,}", 15),
        (r"\?\s*.*\?\s*.*\?", 10),
        (r"try\s*\{[^}]+try\s*\{", 10),
    ),
    "external": (
        (r"fetch\s*\(|axios|http\.|https\.", 15),
        (r"\.get\(|\.post\(|\.put\(|\.delete\(", 10),
        (r"webhook|callback|endpoint", 10),
        (r"socket|websocket|ws\.", 15),
        (r"graphql|grpc|rest", 10),
    ),
    "data_handling": (
        (r"email|phone|address|ssn|social.?security", 20),
        (r"credit.?card|card.?number|cvv|expir", 25),
        (r"personal|private|sensitive|pii", 15),
        (r"gdpr|hipaa|pci|compliance", 10),
        (r"user\..*\.|profile\.|account\.", 10),
    ),
}

DEFAULT_RISK_RULES: tuple[RiskRule, ...] = tuple(
    RiskRule.build(category, pattern, weight)
    for category, sources in _RULE_SOURCES.items()
    for pattern, weight in sources
)

# dataHandling is accepted as an alias in rule files
_CATEGORY_ALIASES = {"dataHandling": "data_handling"}


def load_risk_rules(path: Path) -> tuple[RiskRule, ...]:
    """Default rules plus the rules listed in a YAML file.

    Raises:
        ConfigError: If the file is unparsable or a rule is malformed.
    """
    if not path.exists():
        raise ConfigError.file_not_found(str(path))
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or []
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(raw, list):
        raise ConfigError.parse_error(str(path), "expected a list of rules")

    extra: list[RiskRule] = []
    for index, item in enumerate(raw):
        field = f"risk.rules[{index}]"
        if not isinstance(item, dict):
            raise ConfigError.invalid_value(field, item, "rule must be a mapping")
        category = _CATEGORY_ALIASES.get(item.get("category", ""), item.get("category"))
        if category not in RISK_CATEGORIES:
            raise ConfigError.invalid_value(
                f"{field}.category", category, f"must be one of {', '.join(RISK_CATEGORIES)}"
            )
        weight = item.get("weight")
        if not isinstance(weight, int) or weight <= 0:
            raise ConfigError.invalid_value(f"{field}.weight", weight, "must be a positive int")
        try:
            extra.append(RiskRule.build(category, str(item.get("pattern", "")), weight))
        except re.error as e:
            raise ConfigError.invalid_value(f"{field}.pattern", item.get("pattern"), str(e)) from e

    log.debug("risk_rules_loaded", path=str(path), extra=len(extra))
    return DEFAULT_RISK_RULES + tuple(extra)


def risk_level_for(score: int) -> RiskLevel:
    if score >= 80:
        return "critical"
    if score >= 60:
        return "high"
    if score >= 40:
        return "medium"
    if score >= 20:
        return "low"
    return "minimal"


def level_at_least(level: RiskLevel, minimum: RiskLevel) -> bool:
    return RISK_LEVELS.index(level) >= RISK_LEVELS.index(minimum)


def assess_content(
    content: str,
    file_path: str = "",
    rules: Sequence[RiskRule] = DEFAULT_RISK_RULES,
    excerpt_chars: int = RISK_EXCERPT_CHARS,
) -> RiskAssessment:
    """Assess a text. Pure: equal input gives equal output."""
    scores: dict[RiskCategory, int] = dict.fromkeys(RISK_CATEGORIES, 0)
    matches: list[RiskMatch] = []

    for number, line in enumerate(content.split("\n"), start=1):
        for rule in rules:
            if rule.pattern.search(line) is None:
                continue
            scores[rule.category] = min(FACTOR_MAX, scores[rule.category] + rule.weight)
            matches.append(
                RiskMatch(
                    category=rule.category,
                    pattern=rule.pattern.pattern,
                    line=number,
                    excerpt=line.strip()[:excerpt_chars],
                )
            )

    factors = RiskFactors(**scores)
    return RiskAssessment(
        file_path=file_path,
        risk_level=risk_level_for(factors.total),
        risk_score=factors.total,
        factors=factors,
        matches=matches,
    )


def assess_file_risk(
    file_path: str,
    rules: Sequence[RiskRule] = DEFAULT_RISK_RULES,
    repo_root: Path | None = None,
    excerpt_chars: int = RISK_EXCERPT_CHARS,
) -> RiskAssessment:
    """Assess a file on disk. Missing files are minimal risk."""
    path = normalize_path(file_path, repo_root)
    on_disk = (repo_root / path) if repo_root is not None else Path(path)
    try:
        content = on_disk.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return assess_content("", path, rules, excerpt_chars)
    return assess_content(content, path, rules, excerpt_chars)


def filter_by_risk(
    file_paths: Iterable[str],
    min_level: RiskLevel = "low",
    rules: Sequence[RiskRule] = DEFAULT_RISK_RULES,
    repo_root: Path | None = None,
) -> tuple[list[RiskAssessment], list[RiskAssessment]]:
    """Split files into (included, excluded) by minimum risk level."""
    included: list[RiskAssessment] = []
    excluded: list[RiskAssessment] = []
    for file_path in file_paths:
        assessment = assess_file_risk(file_path, rules, repo_root)
        target = included if level_at_least(assessment.risk_level, min_level) else excluded
        target.append(assessment)
    return included, excluded


def assess_diff_risk(
    repo_root: Path,
    rules: Sequence[RiskRule] = DEFAULT_RISK_RULES,
    history: GitHistory | None = None,
) -> list[RiskAssessment]:
    """Assess every file changed relative to HEAD."""
    history = history or GitHistory(repo_root)
    return [assess_file_risk(f, rules, repo_root) for f in history.changed_files()]
