from __future__ import annotations

import asyncio
from dataclasses import dataclass

from .config import Settings, VoiceTimings, settings as default_settings
from .locales import coerce_locale
from .navigation import HistoryNavigator
from .voice.butler import VoiceButler
from .voice.dispatcher import CommandDispatcher, DispatchOutcome
from .voice.interfaces import HapticFeedback, MedicineIntentService, SpeechRecognizer, SpeechSynthesizer
from .voice.speech_io import SpeechIOAdapter, VoiceOutputConfig


@dataclass(slots=True)
class AppState:
    """What the current page exposes to the voice engine."""

    route: str
    locale: str
    page_content: str = ""


class VoiceCompanion:
    """Wires speech I/O, the butler and the dispatcher around one navigator."""

    def __init__(
        self,
        *,
        recognizer: SpeechRecognizer,
        synthesizer: SpeechSynthesizer,
        navigator: HistoryNavigator | None = None,
        intent_service: MedicineIntentService | None = None,
        haptics: HapticFeedback | None = None,
        config: Settings | None = None,
        timings: VoiceTimings | None = None,
    ) -> None:
        self.config = config or default_settings
        self.timings = timings or VoiceTimings.from_settings(self.config)
        self.navigator = navigator or HistoryNavigator()
        self.state = AppState(route=self.navigator.current_route, locale=coerce_locale(self.config.default_locale).value)

        self.speech = SpeechIOAdapter(
            recognizer,
            synthesizer,
            locale_provider=self._current_locale,
            output_config=VoiceOutputConfig(enabled=self.config.voice_enabled, rate=self.config.speech_rate),
            route_cooldown_seconds=self.config.route_cooldown_seconds,
        )
        self.butler = VoiceButler(self.speech, locale_provider=self._current_locale, timings=self.timings)
        self.dispatcher = CommandDispatcher(
            speech=self.speech,
            butler=self.butler,
            navigator=self.navigator,
            intent_service=intent_service,
            haptics=haptics,
            timings=self.timings,
            acceptance_threshold=self.config.acceptance_threshold,
            excluded_routes=self.config.excluded_routes,
        )
        self._last_dispatch: asyncio.Task[DispatchOutcome] | None = None

        self.navigator.add_listener(self._on_route_change)
        self._unsubscribe = self.speech.subscribe(self._on_transcript)

    @property
    def last_dispatch(self) -> asyncio.Task[DispatchOutcome] | None:
        return self._last_dispatch

    def set_locale(self, locale: str) -> None:
        self.state.locale = coerce_locale(locale).value

    def set_page_content(self, content: str) -> None:
        self.state.page_content = content

    async def enter_page(
        self,
        page_name: str,
        primary_action: str,
        *,
        page_content: str | None = None,
        auto_activate_mic: bool = True,
    ) -> None:
        """Announce a freshly shown page and hand the turn to the user."""
        self.state.page_content = page_content if page_content is not None else f"{page_name}. {primary_action}"
        await self.butler.announce_and_listen(page_name, primary_action, auto_activate_mic)

    def close(self) -> None:
        self._unsubscribe()
        self.butler.close()
        self.dispatcher.close()
        self.speech.stop_listening()
        self.speech.stop_speaking()

    def _current_locale(self) -> str:
        return self.state.locale

    def _on_transcript(self, transcript: str) -> None:
        self.butler.note_user_speech()
        task = self.dispatcher.handle_transcript(
            transcript,
            route=self.state.route,
            locale=self.state.locale,
            page_content=self.state.page_content,
        )
        if task is not None:
            self._last_dispatch = task

    def _on_route_change(self, route: str) -> None:
        self.state.route = route
        self.state.page_content = ""
        self.dispatcher.on_route_change(route)
        self.butler.stop_auto_listening()
        self.speech.reset_for_route_change()
