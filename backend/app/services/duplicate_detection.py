"""Duplicate detection for imported contacts.

Classifies each candidate row as a likely duplicate of an existing contact
or as unique. Matching runs as an ordered list of strategies; each strategy
only sees the rows no earlier strategy claimed, so a row matched by email is
never reconsidered by the name passes.

Existing contacts must be supplied in a stable order (the store lists them
by id). Fuzzy ties go to the first existing contact encountered, so the
order decides which contact wins a tie.
"""
import logging
import re
from dataclasses import dataclass
from typing import Any, Protocol, Sequence

from app.core.config import settings
from app.schemas.imports import (
    CandidateRecord,
    Confidence,
    DuplicateDetectionResult,
    DuplicateMatch,
    ExistingContactSummary,
    MatchType,
)

logger = logging.getLogger(__name__)

_PUNCTUATION_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")


# ─── Normalization & scoring ───

def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def normalize_name(name: str | None) -> str:
    """Lowercase, strip punctuation, collapse whitespace."""
    name = _PUNCTUATION_RE.sub("", (name or "").lower())
    return _WHITESPACE_RE.sub(" ", name).strip()


def name_similarity(a: str, b: str) -> float:
    """Similarity of two normalized names in [0, 1].

    Containment scores shorter/longer length; otherwise the share of tokens
    of the larger token set that also occur in the other name.
    """
    shorter, longer = sorted((a, b), key=len)
    if not longer:
        return 1.0
    if shorter in longer:
        return len(shorter) / len(longer)

    tokens_a, tokens_b = set(a.split()), set(b.split())
    if not tokens_a or not tokens_b:
        return 0.0
    return len(tokens_a & tokens_b) / max(len(tokens_a), len(tokens_b))


# ─── Strategies ───

@dataclass
class StrategyHit:
    existing: Any
    confidence: Confidence
    similarity: float = 1.0


class MatchStrategy(Protocol):
    match_type: MatchType

    def find(self, candidate: CandidateRecord, existing: Sequence[Any]) -> StrategyHit | None:
        ...


class EmailMatcher:
    match_type: MatchType = "email"

    def find(self, candidate, existing):
        email = normalize_email(candidate.email)
        if not email:
            return None
        for contact in existing:
            if normalize_email(contact.email) == email:
                return StrategyHit(existing=contact, confidence="exact")
        return None


class ExactNameMatcher:
    match_type: MatchType = "name"

    def find(self, candidate, existing):
        name = normalize_name(candidate.full_name)
        if not name:
            return None
        for contact in existing:
            if normalize_name(contact.full_name) == name:
                return StrategyHit(existing=contact, confidence="exact")
        return None


@dataclass
class FuzzyNameMatcher:
    threshold: float = 0.8
    high_confidence: float = 0.9
    min_length: int = 3
    match_type: MatchType = "fuzzy_name"

    def find(self, candidate, existing):
        name = normalize_name(candidate.full_name)
        if len(name) < self.min_length:
            return None

        best = None
        best_score = 0.0
        for contact in existing:
            other = normalize_name(contact.full_name)
            if len(other) < self.min_length:
                continue
            score = name_similarity(name, other)
            # strict ">" keeps the first contact on ties
            if score > best_score and score >= self.threshold:
                best, best_score = contact, score

        if best is None:
            return None
        confidence: Confidence = "high" if best_score >= self.high_confidence else "medium"
        return StrategyHit(existing=best, confidence=confidence, similarity=round(best_score, 4))


def default_strategies() -> list[MatchStrategy]:
    return [
        EmailMatcher(),
        ExactNameMatcher(),
        FuzzyNameMatcher(
            threshold=settings.FUZZY_MATCH_THRESHOLD,
            high_confidence=settings.FUZZY_HIGH_CONFIDENCE_THRESHOLD,
            min_length=settings.FUZZY_MIN_NAME_LENGTH,
        ),
    ]


# ─── Pipeline ───

def detect_duplicates(
    candidates: Sequence[CandidateRecord],
    existing: Sequence[Any],
    strategies: Sequence[MatchStrategy] | None = None,
) -> DuplicateDetectionResult:
    """Run each strategy over the still-unmatched candidates, in order.

    Args:
        candidates: Parsed rows, in file order.
        existing: Existing contacts (objects with id, full_name, email, ...),
            in a stable order.
        strategies: Ordered matchers; defaults to email, exact name, fuzzy name.

    Returns:
        Duplicates in strategy order, then candidate order within a strategy,
        plus the candidates no strategy matched.
    """
    strategies = list(strategies) if strategies is not None else default_strategies()
    duplicates: list[DuplicateMatch] = []
    remaining = list(candidates)

    for strategy in strategies:
        unmatched: list[CandidateRecord] = []
        for candidate in remaining:
            hit = strategy.find(candidate, existing)
            if hit is None:
                unmatched.append(candidate)
                continue
            duplicates.append(DuplicateMatch(
                candidate=candidate,
                existing_id=hit.existing.id,
                existing_contact=ExistingContactSummary.model_validate(hit.existing),
                match_type=strategy.match_type,
                confidence=hit.confidence,
                similarity=hit.similarity,
            ))
            logger.debug(
                "detect_duplicates: row %d → %s (%s, %s)",
                candidate.row_number, hit.existing.id, strategy.match_type, hit.confidence,
            )
        remaining = unmatched

    logger.info(
        "detect_duplicates: %d candidates, %d duplicates, %d unique",
        len(candidates), len(duplicates), len(remaining),
    )
    return DuplicateDetectionResult(duplicates=duplicates, unique=remaining)
