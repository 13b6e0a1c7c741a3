"""Free-text "add a medicine" intent detection."""

from __future__ import annotations

import logging
import re

from saarthi_voice.models import IntentResult

from .prompts import prompt

_ADD_VERBS = re.compile(
    r"\b(?:add|new medicine|i take|i need to take|i have to take|take|start)\b",
    re.IGNORECASE,
)
_ADD_PHRASES = ("जोड़", "जोड़ो", "जोडा", "नई दवाई", "नवीन औषध", "लेना है", "घ्यायचे", "घ्यायची")

_DOSAGE = re.compile(
    r"\b\d+(?:\.\d+)?\s*(?:mg|mcg|ml|g|iu|units?|tablets?|capsules?|drops?|puffs?)\b",
    re.IGNORECASE,
)
_TIMING = re.compile(
    r"\b(?:morning|afternoon|evening|night|bedtime|daily|every day|once|twice|thrice|"
    r"before food|after food|with food|empty stomach)\b",
    re.IGNORECASE,
)
_TIMING_PHRASES = ("सुबह", "दोपहर", "शाम", "रात", "रोज", "सकाळी", "दुपारी", "संध्याकाळी", "रात्री")
_KNOWN_MEDICINES = re.compile(
    r"\b(?:paracetamol|amlodipine|metformin|aspirin|crocin|dolo|atorvastatin|telmisartan|pantoprazole)\b",
    re.IGNORECASE,
)


class MedicineAddIntentDetector:
    """Heuristic over sentence shape: an add verb plus a dosage, timing, or known name.

    Deliberately not a fixed keyword list, so "take me home" stays a navigation
    command while "take metformin twice daily" is routed to extraction.
    """

    def is_add_request(self, utterance: str | None) -> bool:
        text = " ".join((utterance or "").split())
        if not text:
            return False

        lowered = text.lower()
        has_add_intent = bool(_ADD_VERBS.search(text)) or any(phrase in lowered for phrase in _ADD_PHRASES)
        if not has_add_intent:
            return False

        return bool(
            _DOSAGE.search(text)
            or _TIMING.search(text)
            or _KNOWN_MEDICINES.search(text)
            or any(phrase in lowered for phrase in _TIMING_PHRASES)
        )


class UnavailableIntentService:
    """Fallback used when no extraction backend is configured."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("saarthi_voice.intents")

    async def add_from_utterance(self, utterance: str, locale: str) -> IntentResult:
        self._logger.info("intent_service_unavailable", extra={"utterance": utterance, "locale": locale})
        return IntentResult(success=False, voice_feedback=prompt("INTENT_UNAVAILABLE", locale))
