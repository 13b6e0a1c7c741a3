"""Text-to-speech backend powered by ``pyttsx3``."""

from __future__ import annotations

import threading

from .interfaces import SpeechOptions, SpeechSynthesizer, SynthesisVoice


class Pyttsx3Synthesizer(SpeechSynthesizer):
    """Speaker playback using a local pyttsx3 engine instance.

    The engine is only ever driven from the thread running ``runAndWait``.
    ``cancel`` just raises a flag; the engine's own ``started-word`` callback
    sees it and calls ``engine.stop()`` at the next word boundary, so a
    cancelled utterance may finish its current word.
    """

    def __init__(self, *, base_rate: int = 180, voice_id: str | None = None) -> None:
        try:
            import pyttsx3
        except ImportError as exc:  # pragma: no cover - import guard
            raise RuntimeError(
                "Voice TTS backend unavailable. Install extras with: pip install 'saarthi-voice[voice]'"
            ) from exc

        self._engine = pyttsx3.init()
        self._base_rate = base_rate
        self._default_voice = voice_id
        self._lock = threading.Lock()
        self._cancel_requested = threading.Event()
        self._engine.connect("started-word", self._on_word)

    def voices(self) -> list[SynthesisVoice]:
        voices = []
        with self._lock:
            installed = self._engine.getProperty("voices") or []
        for voice in installed:
            languages = getattr(voice, "languages", None) or []
            lang = _language_tag(languages[0]) if languages else ""
            voices.append(SynthesisVoice(id=voice.id, lang=lang, name=getattr(voice, "name", "") or ""))
        return voices

    def speak(self, text: str, options: SpeechOptions) -> None:
        text = text.strip()
        if not text:
            return
        with self._lock:
            # A cancel aimed at the previous utterance must not cut this one.
            self._cancel_requested.clear()
            voice = options.voice_id or self._default_voice
            if voice:
                self._engine.setProperty("voice", voice)
            self._engine.setProperty("rate", int(self._base_rate * options.rate))
            self._engine.setProperty("volume", max(0.0, min(1.0, options.volume)))
            # pyttsx3 exposes no portable pitch control; options.pitch is ignored.
            self._engine.say(text)
            self._engine.runAndWait()

    def cancel(self) -> None:
        self._cancel_requested.set()

    def _on_word(self, name, location, length) -> None:
        if self._cancel_requested.is_set():
            self._engine.stop()


def _language_tag(raw: bytes | str) -> str:
    """Normalize driver language ids (``b'\\x05en-us'``, ``en_US``) to ``en-US`` form."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="ignore")
    cleaned = "".join(ch for ch in raw if ch.isprintable()).strip().replace("_", "-")
    if "-" not in cleaned:
        return cleaned.lower()
    language, region = cleaned.split("-", 1)
    return f"{language.lower()}-{region.upper()}"
