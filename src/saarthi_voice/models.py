from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from .locales import Locale


class ActionId(str, Enum):
    """Discrete actions a spoken utterance can resolve to."""

    HOME = "HOME"
    SCAN = "SCAN"
    MEDICINES = "MEDICINES"
    REMINDERS = "REMINDERS"
    BACK = "BACK"
    REPEAT = "REPEAT"
    HELP = "HELP"
    VERIFY_MEDICINE = "VERIFY_MEDICINE"
    ALARM = "ALARM"
    STOP = "STOP"

    # route-scoped
    CAPTURE = "CAPTURE"
    RETAKE = "RETAKE"
    CONFIRM = "CONFIRM"
    CANCEL = "CANCEL"
    TAKEN = "TAKEN"
    SNOOZE = "SNOOZE"

    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True, slots=True)
class CommandDefinition:
    action: ActionId
    keywords: Mapping[Locale, tuple[str, ...]]

    def all_keywords(self) -> tuple[str, ...]:
        """Every keyword across all locales, in locale declaration order."""
        return tuple(keyword for locale in Locale for keyword in self.keywords.get(locale, ()))


@dataclass(frozen=True, slots=True)
class MatchResult:
    action: ActionId
    confidence: float

    @classmethod
    def unknown(cls) -> MatchResult:
        return cls(action=ActionId.UNKNOWN, confidence=0.0)

    @property
    def is_unknown(self) -> bool:
        return self.action == ActionId.UNKNOWN


@dataclass(frozen=True, slots=True)
class CommandSuggestion:
    action: ActionId
    keyword: str
    confidence: float


@dataclass(frozen=True, slots=True)
class ContextActionEvent:
    """Payload delivered to route-owned handlers for a resolved context action."""

    action: ActionId
    utterance: str
    route: str


@dataclass(frozen=True, slots=True)
class IntentResult:
    success: bool
    voice_feedback: str
