"""Contracts for the collaborators the voice engine drives."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol

from saarthi_voice.errors import RecognitionError
from saarthi_voice.models import IntentResult

ResultCallback = Callable[[str, bool], None]
ErrorCallback = Callable[[RecognitionError], None]


@dataclass(frozen=True, slots=True)
class SynthesisVoice:
    id: str
    lang: str
    name: str = ""


@dataclass(frozen=True, slots=True)
class SpeechOptions:
    """Per-utterance synthesis controls."""

    locale: str
    rate: float = 0.9
    pitch: float = 1.0
    volume: float = 1.0
    voice_id: str | None = None


class SpeechRecognizer(Protocol):
    """Continuous recognition session keyed by locale."""

    def start(self, locale: str, on_result: ResultCallback, on_error: ErrorCallback) -> None:
        """Begin recognition; raise ``RecognitionUnavailableError`` when it can never run.

        ``on_result`` receives ``(text, is_final)`` and ``on_error`` receives transient
        failures. Both must be invoked on the event loop thread.
        """

    def stop(self) -> None:
        """End the current recognition session, if any."""


class SpeechSynthesizer(Protocol):
    """Blocking text-to-speech playback."""

    def voices(self) -> list[SynthesisVoice]:
        """Return voices installed on this host."""

    def speak(self, text: str, options: SpeechOptions) -> None:
        """Play ``text`` and return once audio finished or was cancelled."""

    def cancel(self) -> None:
        """Stop any audible utterance immediately. Safe to call from any thread."""


class Navigator(Protocol):
    def navigate(self, route: str) -> None: ...

    def back(self) -> None: ...


class HapticPattern(Enum):
    """Vibration signatures in milliseconds (on, off, on, ...)."""

    ACTION = (30,)
    SUCCESS = (50, 30, 50)
    ALERT = (200, 100, 200)
    ERROR = (100, 50, 100, 50, 100)


class HapticFeedback(Protocol):
    def pulse(self, pattern: HapticPattern) -> None: ...


class MedicineIntentService(Protocol):
    """Extracts a medicine to add from a free-text utterance."""

    async def add_from_utterance(self, utterance: str, locale: str) -> IntentResult: ...
