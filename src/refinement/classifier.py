"""Intent classification for free-text feedback.

The keyword rule table below is the only natural-language handling the engine
does. Everything that needs to read intent from feedback (strategy gating,
preference learning, batch pattern analysis) goes through an
``IntentClassifier``, so a model-backed classifier can replace the table
without touching the scorer.
"""

from dataclasses import dataclass, field
from typing import Optional, Protocol

from .models import LengthDirection, LengthPreference, StrategyType, Tone


# Tone keywords, in priority order: the first listed keyword present wins.
TONE_KEYWORDS: list[tuple[str, Tone]] = [
    ("formal", Tone.FORMAL),
    ("casual", Tone.CASUAL),
    ("professional", Tone.PROFESSIONAL),
    ("friendly", Tone.FRIENDLY),
]

SHORT_KEYWORDS = ("shorter", "brief")
LONG_KEYWORDS = ("longer", "expand")
EXPAND_KEYWORDS = ("longer", "expand", "more detail")

# Keywords that put a strategy on the candidate list
GATING_KEYWORDS: dict[StrategyType, tuple[str, ...]] = {
    StrategyType.TONE_ADJUSTMENT: (
        "tone", "formal", "casual", "professional", "friendly",
    ),
    StrategyType.LENGTH_MODIFICATION: (
        "longer", "shorter", "brief", "expand", "condense",
    ),
    StrategyType.STRUCTURE_REORGANIZATION: (
        "structure", "organize", "flow", "format",
    ),
}

# Keywords that additionally boost a gated strategy's score
BOOST_KEYWORDS: dict[StrategyType, tuple[str, ...]] = {
    StrategyType.TONE_ADJUSTMENT: ("tone", "formal", "casual"),
    StrategyType.LENGTH_MODIFICATION: ("longer", "shorter", "brief"),
    StrategyType.STRUCTURE_REORGANIZATION: ("structure", "organize", "flow"),
}


@dataclass
class Intent:
    """What a piece of feedback appears to ask for."""

    tone: Optional[Tone] = None
    length: Optional[LengthPreference] = None
    length_direction: LengthDirection = LengthDirection.CONDENSE
    requested: set[StrategyType] = field(default_factory=set)
    confirmed: set[StrategyType] = field(default_factory=set)
    structural_hints: list[str] = field(default_factory=list)


class IntentClassifier(Protocol):
    """Anything that can read intent out of feedback text."""

    def classify_intent(self, text: Optional[str]) -> Intent:
        ...


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)


def detect_tone(text: str) -> Optional[Tone]:
    """First tone keyword (in priority order) found in lower-cased text."""
    for keyword, tone in TONE_KEYWORDS:
        if keyword in text:
            return tone
    return None


def detect_length(text: str) -> Optional[LengthPreference]:
    """Short wins over long; the checks are mutually exclusive."""
    if _contains_any(text, SHORT_KEYWORDS):
        return LengthPreference.SHORT
    if _contains_any(text, LONG_KEYWORDS):
        return LengthPreference.LONG
    return None


class KeywordIntentClassifier:
    """Lower-cased substring matching against fixed keyword tables."""

    def __init__(
        self,
        gating_keywords: Optional[dict[StrategyType, tuple[str, ...]]] = None,
        boost_keywords: Optional[dict[StrategyType, tuple[str, ...]]] = None,
    ):
        self.gating_keywords = gating_keywords or GATING_KEYWORDS
        self.boost_keywords = boost_keywords or BOOST_KEYWORDS

    def classify_intent(self, text: Optional[str]) -> Intent:
        lowered = (text or "").lower()

        requested = {
            strategy_type
            for strategy_type, keywords in self.gating_keywords.items()
            if _contains_any(lowered, keywords)
        }
        confirmed = {
            strategy_type
            for strategy_type, keywords in self.boost_keywords.items()
            if _contains_any(lowered, keywords)
        }
        structural_hints = [
            keyword
            for keyword in self.gating_keywords.get(
                StrategyType.STRUCTURE_REORGANIZATION, ()
            )
            if keyword in lowered
        ]

        direction = (
            LengthDirection.EXPAND
            if _contains_any(lowered, EXPAND_KEYWORDS)
            else LengthDirection.CONDENSE
        )

        return Intent(
            tone=detect_tone(lowered),
            length=detect_length(lowered),
            length_direction=direction,
            requested=requested,
            confirmed=confirmed,
            structural_hints=structural_hints,
        )
