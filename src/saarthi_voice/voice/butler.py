"""Turn-taking orchestration: speak, settle, listen, nudge."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Mapping

from saarthi_voice.config import VoiceTimings
from saarthi_voice.errors import VoiceEngineError
from saarthi_voice.locales import DEFAULT_LOCALE, localize

from .prompts import prompt
from .speech_io import SpeechIOAdapter

SPEECH_POLL_SECONDS = 0.05


@dataclass(slots=True)
class SessionState:
    """Auto-listening session fields, written only by ``VoiceButler``."""

    is_auto_listening: bool = False
    last_speech_timestamp: float | None = None

    def reset(self) -> None:
        self.is_auto_listening = False
        self.last_speech_timestamp = None


class VoiceButler:
    """Sequences announcements with microphone reactivation and an idle nudge.

    ``Idle -> Announcing -> (AutoListening | Idle)``. After an announcement that
    asks for a reply, the mic is re-armed once the echo buffer elapses and a single
    idle-prompt watchdog starts, but only if the adapter actually opened the mic.
    Leaving AutoListening for any reason cancels the watchdog, so a nudge never
    plays for a session that already moved on.
    """

    def __init__(
        self,
        speech: SpeechIOAdapter,
        *,
        locale_provider: Callable[[], str] | None = None,
        timings: VoiceTimings | None = None,
        clock: Callable[[], float] = time.time,
        logger: logging.Logger | None = None,
    ) -> None:
        self._speech = speech
        self._locale_provider = locale_provider or (lambda: DEFAULT_LOCALE.value)
        self._timings = timings or VoiceTimings()
        self._clock = clock
        self._logger = logger or logging.getLogger("saarthi_voice.butler")

        self._state = SessionState()
        self._cycle = 0
        self._reactivation_task: asyncio.Task[None] | None = None
        self._idle_task: asyncio.Task[None] | None = None

    @property
    def is_auto_listening(self) -> bool:
        return self._state.is_auto_listening

    @property
    def last_speech_timestamp(self) -> float | None:
        return self._state.last_speech_timestamp

    @property
    def idle_prompt_pending(self) -> bool:
        return self._idle_task is not None and not self._idle_task.done()

    async def announce_and_listen(
        self,
        primary_text: str,
        secondary_text: str = "",
        auto_activate_mic: bool = True,
    ) -> None:
        """Speak ``primary_text. secondary_text`` and optionally reopen the mic afterwards."""
        announcement = ". ".join(part.strip() for part in (primary_text, secondary_text) if part and part.strip())
        await self._announce_cycle(announcement, auto_activate_mic)

    async def announce_localized(self, messages_by_locale: Mapping[str, str], auto_activate_mic: bool = True) -> None:
        message = localize(messages_by_locale, self._locale_provider(), DEFAULT_LOCALE)
        await self._announce_cycle(message, auto_activate_mic)

    async def announce(self, text: str) -> None:
        """Speak without touching the listening session."""
        await self._speak_safely(text)

    def stop_auto_listening(self) -> None:
        """End the session; safe to call when not listening."""
        self._cancel_reactivation()
        self._cancel_idle_prompt()
        self._state.reset()

    def note_user_speech(self) -> None:
        """The user said something, so the pending nudge is no longer needed."""
        self._cancel_idle_prompt()
        if self._state.is_auto_listening:
            self._state.last_speech_timestamp = self._clock()

    def close(self) -> None:
        self._cycle += 1
        self.stop_auto_listening()

    async def _announce_cycle(self, text: str, auto_activate_mic: bool) -> None:
        self._cycle += 1
        cycle = self._cycle
        self.stop_auto_listening()

        await self._speak_safely(text)

        if not auto_activate_mic or cycle != self._cycle:
            return
        self._reactivation_task = asyncio.create_task(
            self._reactivate_after_echo_buffer(cycle),
            name="voice-butler-reactivate",
        )

    async def _reactivate_after_echo_buffer(self, cycle: int) -> None:
        await asyncio.sleep(self._timings.echo_buffer_seconds)
        # Another utterance took the floor during the buffer; give it its own.
        while cycle == self._cycle and self._speech.is_speaking:
            await asyncio.sleep(max(self._timings.echo_buffer_seconds, SPEECH_POLL_SECONDS))
        if cycle != self._cycle:
            return

        self._speech.start_listening()
        if not self._speech.is_listening:
            self._logger.warning("auto_listening_not_started", extra={"cycle": cycle})
            return

        self._state.is_auto_listening = True
        self._state.last_speech_timestamp = self._clock()
        self._arm_idle_prompt()
        self._logger.info("auto_listening_started", extra={"cycle": cycle})

    def _arm_idle_prompt(self) -> None:
        self._cancel_idle_prompt()
        self._idle_task = asyncio.create_task(self._idle_prompt(self._cycle), name="voice-butler-idle-prompt")

    async def _idle_prompt(self, cycle: int) -> None:
        await asyncio.sleep(self._timings.idle_prompt_seconds)
        if cycle != self._cycle or not self._state.is_auto_listening:
            return

        self._idle_task = None
        self._logger.info("idle_prompt_fired", extra={"cycle": cycle})
        await self._speak_safely(prompt("IDLE_NUDGE", self._locale_provider()))

    async def _speak_safely(self, text: str) -> None:
        try:
            await self._speech.speak(text)
        except VoiceEngineError as exc:
            # A broken voice output must not also break voice input.
            self._logger.error("announcement_failed", extra={"error": str(exc)})

    def _cancel_reactivation(self) -> None:
        task, self._reactivation_task = self._reactivation_task, None
        _cancel_task(task)

    def _cancel_idle_prompt(self) -> None:
        task, self._idle_task = self._idle_task, None
        _cancel_task(task)


def _cancel_task(task: asyncio.Task[None] | None) -> None:
    if task is None or task.done():
        return
    try:
        current = asyncio.current_task()
    except RuntimeError:
        current = None
    if task is not current:
        task.cancel()
