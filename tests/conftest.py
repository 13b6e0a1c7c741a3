from __future__ import annotations

import threading

import pytest

from saarthi_voice.config import VoiceTimings
from saarthi_voice.voice.interfaces import HapticPattern, SpeechOptions, SynthesisVoice


class FakeRecognizer:
    def __init__(self) -> None:
        self.starts = 0
        self.stops = 0
        self.locale: str | None = None
        self.fail_with: Exception | None = None
        self._on_result = None
        self._on_error = None

    def start(self, locale, on_result, on_error) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.starts += 1
        self.locale = locale
        self._on_result = on_result
        self._on_error = on_error

    def stop(self) -> None:
        self.stops += 1

    def emit(self, text: str, final: bool = True) -> None:
        self._on_result(text, final)

    def fail(self, error) -> None:
        self._on_error(error)


class FakeSynthesizer:
    def __init__(self) -> None:
        self.spoken: list[str] = []
        self.options: list[SpeechOptions] = []
        self.cancels = 0
        self.fail = False
        self.hold_seconds = 0.0
        self.installed_voices: list[SynthesisVoice] = []
        self._cancelled = threading.Event()

    def voices(self) -> list[SynthesisVoice]:
        return list(self.installed_voices)

    def speak(self, text: str, options: SpeechOptions) -> None:
        self._cancelled.clear()
        self.spoken.append(text)
        self.options.append(options)
        if self.fail:
            raise RuntimeError("audio device lost")
        if self.hold_seconds:
            self._cancelled.wait(self.hold_seconds)

    def cancel(self) -> None:
        self.cancels += 1
        self._cancelled.set()


class RecordingNavigator:
    def __init__(self) -> None:
        self.calls: list[tuple[str, ...]] = []

    def navigate(self, route: str) -> None:
        self.calls.append(("navigate", route))

    def back(self) -> None:
        self.calls.append(("back",))


class RecordingHaptics:
    def __init__(self) -> None:
        self.pulses: list[HapticPattern] = []

    def pulse(self, pattern: HapticPattern) -> None:
        self.pulses.append(pattern)


@pytest.fixture
def recognizer() -> FakeRecognizer:
    return FakeRecognizer()


@pytest.fixture
def synthesizer() -> FakeSynthesizer:
    return FakeSynthesizer()


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()


@pytest.fixture
def haptics() -> RecordingHaptics:
    return RecordingHaptics()


@pytest.fixture
def timings() -> VoiceTimings:
    return VoiceTimings(echo_buffer_seconds=0.01, idle_prompt_seconds=0.05, navigation_delay_seconds=0.01)
