"""
Challenge phrase generation and tolerant matching of spoken attempts.

Speech transcription drops punctuation and mishears the odd word, so an
attempt passes on exact normalized equality or when enough of the target
words appear in it.
"""

import random
import re
from typing import Optional, Sequence

from ..core.phrases import MOTIVATIONAL_PHRASES

DEFAULT_MATCH_THRESHOLD = 0.8


def normalize_phrase(text: str) -> str:
    """Lowercase, drop punctuation, trim."""
    return re.sub(r"[^\w\s]", "", text.lower()).strip()


def generate_phrase(
    phrases: Optional[Sequence[str]] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """Pick a random phrase. Phrases are never persisted."""
    pool = list(phrases) if phrases else list(MOTIVATIONAL_PHRASES)
    return (rng or random).choice(pool)


def validate_phrase(
    target: str, candidate: str, threshold: float = DEFAULT_MATCH_THRESHOLD
) -> bool:
    """Return True if *candidate* is an acceptable rendition of *target*.

    Word order is ignored in the fuzzy branch; only the fraction of target
    words present in the candidate counts.
    """
    normalized_target = normalize_phrase(target)
    normalized_candidate = normalize_phrase(candidate)

    target_words = normalized_target.split()
    if not target_words:
        return False

    if normalized_target == normalized_candidate:
        return True

    candidate_words = set(normalized_candidate.split())
    matched = sum(1 for word in target_words if word in candidate_words)
    return matched / len(target_words) >= threshold
