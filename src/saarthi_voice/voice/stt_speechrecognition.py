"""Continuous speech-to-text backend powered by ``speech_recognition``."""

from __future__ import annotations

import asyncio
from typing import Callable

from saarthi_voice.errors import RecognitionError, RecognitionUnavailableError

from .interfaces import ErrorCallback, ResultCallback, SpeechRecognizer


class SpeechRecognitionStream(SpeechRecognizer):
    """Listen in the background and post finalized phrases back onto the event loop."""

    def __init__(
        self,
        *,
        phrase_time_limit: float = 5.0,
        sample_rate: int = 16_000,
        chunk_size: int = 1024,
        adjust_noise_seconds: float = 0.2,
    ) -> None:
        try:
            import speech_recognition as sr
        except ImportError as exc:  # pragma: no cover - import guard
            raise RuntimeError(
                "Voice STT backend unavailable. Install extras with: pip install 'saarthi-voice[voice]'"
            ) from exc
        self._sr = sr
        self._recognizer = sr.Recognizer()
        self._phrase_time_limit = phrase_time_limit
        self._sample_rate = sample_rate
        self._chunk_size = chunk_size
        self._adjust_noise_seconds = max(0.0, adjust_noise_seconds)
        self._stopper: Callable[..., None] | None = None

    def start(self, locale: str, on_result: ResultCallback, on_error: ErrorCallback) -> None:
        if self._stopper is not None:
            return

        loop = asyncio.get_running_loop()
        try:
            microphone = self._sr.Microphone(sample_rate=self._sample_rate, chunk_size=self._chunk_size)
            if self._adjust_noise_seconds > 0:
                with microphone as source:
                    self._recognizer.adjust_for_ambient_noise(source, duration=self._adjust_noise_seconds)
        except (AttributeError, OSError) as exc:
            # PyAudio missing or no input device: nothing will fix this without user action.
            raise RecognitionUnavailableError(f"Microphone unavailable: {exc}") from exc

        sr = self._sr

        def _on_phrase(recognizer, audio) -> None:
            try:
                text = recognizer.recognize_google(audio, language=locale)
            except sr.UnknownValueError:
                loop.call_soon_threadsafe(on_error, RecognitionError("no-speech"))
                return
            except sr.RequestError as exc:
                loop.call_soon_threadsafe(on_error, RecognitionError("network", str(exc)))
                return
            loop.call_soon_threadsafe(on_result, text, True)

        self._stopper = self._recognizer.listen_in_background(
            microphone,
            _on_phrase,
            phrase_time_limit=self._phrase_time_limit,
        )

    def stop(self) -> None:
        stopper, self._stopper = self._stopper, None
        if stopper is not None:
            stopper(wait_for_stop=False)
