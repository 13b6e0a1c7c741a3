"""Speech I/O adapter: a live transcript signal and an awaitable ``speak``."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable

from saarthi_voice.errors import (
    RecognitionError,
    RecognitionUnavailableError,
    SpeechSynthesisError,
    VoiceEngineError,
)
from saarthi_voice.locales import DEFAULT_LOCALE

from .interfaces import SpeechOptions, SpeechRecognizer, SpeechSynthesizer, SynthesisVoice
from .prompts import prompt

TranscriptCallback = Callable[[str], None]


@dataclass(slots=True)
class VoiceOutputConfig:
    """Configurable controls for response speech."""

    enabled: bool = True
    rate: float = 0.9
    pitch: float = 1.0
    volume: float = 1.0
    max_chars: int = 500


class SpeechIOAdapter:
    """Wraps a continuous recognizer and a synthesizer behind two primitives.

    The transcript is replaced, never appended, on every finalized result and
    subscribers are told about each new value. ``speak`` cancels whatever is
    audible before starting, so at most one utterance plays at a time.
    """

    def __init__(
        self,
        recognizer: SpeechRecognizer,
        synthesizer: SpeechSynthesizer,
        *,
        locale_provider: Callable[[], str] | None = None,
        output_config: VoiceOutputConfig | None = None,
        route_cooldown_seconds: float = 0.5,
        logger: logging.Logger | None = None,
    ) -> None:
        self._recognizer = recognizer
        self._synthesizer = synthesizer
        self._locale_provider = locale_provider or (lambda: DEFAULT_LOCALE.value)
        self._config = output_config or VoiceOutputConfig()
        self._route_cooldown_seconds = route_cooldown_seconds
        self._logger = logger or logging.getLogger("saarthi_voice.speech_io")

        self._transcript = ""
        self._listening = False
        self._speaking = False
        self._error: str | None = None
        self._unavailable = False
        self._cooldown_until = 0.0
        self._subscribers: list[TranscriptCallback] = []
        self._voices: list[SynthesisVoice] | None = None
        self._utterance_seq = 0
        self._speak_lock: asyncio.Lock | None = None

    @property
    def transcript(self) -> str:
        return self._transcript

    @property
    def is_listening(self) -> bool:
        return self._listening

    @property
    def is_speaking(self) -> bool:
        return self._speaking

    @property
    def error(self) -> str | None:
        """Code of the last recognizer error, cleared when listening restarts."""
        return self._error

    @property
    def unavailable(self) -> bool:
        return self._unavailable

    @property
    def notice(self) -> str | None:
        """Inline notice to show when recognition can never run on this host."""
        if not self._unavailable:
            return None
        return prompt("RECOGNITION_UNAVAILABLE", self._locale_provider())

    def subscribe(self, callback: TranscriptCallback) -> Callable[[], None]:
        """Register for finalized transcripts; returns an unsubscribe callable."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def start_listening(self) -> None:
        if self._unavailable or self._listening:
            return
        if self._speaking:
            self._logger.warning("mic_blocked_while_speaking")
            return
        if time.monotonic() < self._cooldown_until:
            self._logger.warning("mic_blocked_route_cooldown")
            return

        self._transcript = ""
        self._error = None
        locale = self._locale_provider()
        try:
            self._recognizer.start(locale, self.handle_result, self.handle_error)
        except VoiceEngineError as exc:
            self.handle_error(exc)
            return

        self._listening = True
        self._logger.info("listening_started", extra={"locale": locale})

    def stop_listening(self) -> None:
        if not self._listening:
            return
        self._listening = False
        self._recognizer.stop()
        self._logger.info("listening_stopped")

    def reset_transcript(self) -> None:
        self._transcript = ""

    async def speak(
        self,
        text: str,
        *,
        locale: str | None = None,
        rate: float | None = None,
        pitch: float | None = None,
        volume: float | None = None,
    ) -> None:
        """Speak ``text`` and return when it finished, was cancelled, or was superseded.

        Raises ``SpeechSynthesisError`` when the synthesizer fails.
        """
        if not self._config.enabled:
            return

        normalized = " ".join((text or "").split())
        if not normalized:
            return

        limited = normalized[: self._config.max_chars]
        self._utterance_seq += 1
        seq = self._utterance_seq
        self._synthesizer.cancel()

        if self._speak_lock is None:
            self._speak_lock = asyncio.Lock()

        async with self._speak_lock:
            if seq != self._utterance_seq:
                return

            resolved_locale = locale or self._locale_provider()
            options = SpeechOptions(
                locale=resolved_locale,
                rate=rate if rate is not None else self._config.rate,
                pitch=pitch if pitch is not None else self._config.pitch,
                volume=volume if volume is not None else self._config.volume,
                voice_id=self._select_voice(resolved_locale),
            )
            self._speaking = True
            try:
                await asyncio.to_thread(self._synthesizer.speak, limited, options)
            except Exception as exc:  # noqa: BLE001 - backends fail in many ways.
                self._logger.error(
                    "speech_synthesis_failed",
                    extra={"error": f"{type(exc).__name__}: {exc}", "locale": resolved_locale},
                )
                raise SpeechSynthesisError(str(exc)) from exc
            finally:
                if seq == self._utterance_seq:
                    self._speaking = False

    def stop_speaking(self) -> None:
        """Silence any audible or queued utterance synchronously."""
        self._utterance_seq += 1
        self._synthesizer.cancel()
        self._speaking = False

    def reset_for_route_change(self) -> None:
        """Kill speech and mic, clear the transcript, and hold the mic for a short cool-down."""
        self.stop_speaking()
        self.stop_listening()
        self.reset_transcript()
        self._cooldown_until = time.monotonic() + self._route_cooldown_seconds

    def handle_result(self, text: str, is_final: bool) -> None:
        if not is_final:
            return

        transcript = text.strip()
        if not transcript:
            return

        self._transcript = transcript
        self._logger.info("transcript_received", extra={"transcript": transcript})
        for callback in list(self._subscribers):
            try:
                callback(transcript)
            except Exception:  # noqa: BLE001 - a subscriber must not break recognition.
                self._logger.exception("transcript_subscriber_failed")

    def handle_error(self, error: VoiceEngineError) -> None:
        if self._listening:
            self._listening = False
            self._recognizer.stop()
        if isinstance(error, RecognitionUnavailableError):
            if not self._unavailable:
                self._unavailable = True
                self._error = "unsupported"
                self._logger.error("recognition_unavailable", extra={"reason": str(error)})
            return

        code = error.code if isinstance(error, RecognitionError) else type(error).__name__
        self._error = code
        self._logger.warning("recognition_error", extra={"code": code})

    def _select_voice(self, locale: str) -> str | None:
        if self._voices is None:
            try:
                self._voices = list(self._synthesizer.voices())
            except Exception:  # noqa: BLE001 - voice listing is best effort.
                self._logger.warning("voice_listing_failed")
                self._voices = []

        for voice in self._voices:
            if voice.lang == locale:
                return voice.id
        language = locale.split("-", 1)[0].lower()
        for voice in self._voices:
            if voice.lang.lower().startswith(language):
                return voice.id
        return None
