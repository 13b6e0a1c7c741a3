"""Per-utterance decision pipeline: context, free-text intent, then global commands."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable

from saarthi_voice import routes
from saarthi_voice.config import VoiceTimings
from saarthi_voice.models import ActionId, ContextActionEvent, IntentResult, MatchResult

from .butler import VoiceButler
from .events import ContextActionBus
from .feedback import LoggingHaptics
from .intents import MedicineAddIntentDetector, UnavailableIntentService
from .interfaces import HapticFeedback, HapticPattern, MedicineIntentService, Navigator
from .matcher import ContextCommandResolver, FuzzyCommandMatcher
from .prompts import confirmation_for, help_text, prompt
from .speech_io import SpeechIOAdapter

NAVIGATION_TARGETS: dict[ActionId, str] = {
    ActionId.HOME: routes.DASHBOARD,
    ActionId.SCAN: routes.SCAN,
    ActionId.MEDICINES: routes.MEDICINES,
    ActionId.REMINDERS: routes.REMINDERS,
    ActionId.VERIFY_MEDICINE: routes.VERIFY_MEDICINE,
    ActionId.ALARM: routes.ALARM,
}

DEFAULT_EXCLUDED_ROUTES = (routes.LANGUAGE, routes.REGISTER)


class DispatchStage(str, Enum):
    """Where in the pipeline an utterance was settled."""

    EXCLUDED = "excluded"
    IGNORED = "ignored"
    CONTEXT = "context"
    INTENT = "intent"
    INTENT_BUSY = "intent_busy"
    GLOBAL = "global"


@dataclass(frozen=True, slots=True)
class DispatchOutcome:
    stage: DispatchStage
    action: ActionId = ActionId.UNKNOWN
    confidence: float = 0.0


class CommandDispatcher:
    """Turns one utterance into at most one side effect.

    Resolution stops at the first confident hit: the current route's context
    vocabulary, then the free-text add-medicine intent, then the global command
    table. Anything else is expected noise and is dropped without a word.
    """

    def __init__(
        self,
        *,
        speech: SpeechIOAdapter,
        butler: VoiceButler,
        navigator: Navigator,
        context_bus: ContextActionBus | None = None,
        intent_service: MedicineIntentService | None = None,
        haptics: HapticFeedback | None = None,
        matcher: FuzzyCommandMatcher | None = None,
        context_resolver: ContextCommandResolver | None = None,
        intent_detector: MedicineAddIntentDetector | None = None,
        timings: VoiceTimings | None = None,
        acceptance_threshold: float = 0.5,
        excluded_routes: Iterable[str] = DEFAULT_EXCLUDED_ROUTES,
        logger: logging.Logger | None = None,
    ) -> None:
        self._speech = speech
        self._butler = butler
        self._navigator = navigator
        self._context_bus = context_bus or ContextActionBus()
        self._intent_service = intent_service or UnavailableIntentService()
        self._haptics = haptics or LoggingHaptics()
        self._matcher = matcher or FuzzyCommandMatcher()
        self._context_resolver = context_resolver or ContextCommandResolver()
        self._intent_detector = intent_detector or MedicineAddIntentDetector()
        self._timings = timings or VoiceTimings()
        self._acceptance_threshold = acceptance_threshold
        self._excluded_routes = frozenset(excluded_routes)
        self._logger = logger or logging.getLogger("saarthi_voice.dispatcher")

        self._last_transcript = ""
        self._intent_in_flight = False
        self._route_epoch = 0
        self._pending_timers: set[asyncio.TimerHandle] = set()
        self._tasks: set[asyncio.Task[DispatchOutcome]] = set()

    @property
    def context_bus(self) -> ContextActionBus:
        return self._context_bus

    @property
    def pending_navigations(self) -> int:
        return len(self._pending_timers)

    @property
    def intent_in_flight(self) -> bool:
        return self._intent_in_flight

    def handle_transcript(
        self,
        transcript: str,
        *,
        route: str,
        locale: str,
        page_content: str | None = None,
    ) -> asyncio.Task[DispatchOutcome] | None:
        """Schedule dispatch for a non-empty transcript that changed since the last clear."""
        text = (transcript or "").strip()
        if not text or text == self._last_transcript:
            return None
        self._last_transcript = text

        task = asyncio.get_running_loop().create_task(
            self.dispatch(text, route=route, locale=locale, page_content=page_content),
            name="voice-dispatch",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def dispatch(
        self,
        utterance: str,
        *,
        route: str,
        locale: str,
        page_content: str | None = None,
    ) -> DispatchOutcome:
        text = (utterance or "").strip()
        if not text:
            return DispatchOutcome(stage=DispatchStage.IGNORED)
        if route in self._excluded_routes:
            self._logger.debug("dispatch_excluded_route", extra={"route": route})
            return DispatchOutcome(stage=DispatchStage.EXCLUDED)

        global_match = self._matcher.match(text)
        if global_match.action == ActionId.STOP and global_match.confidence >= 1.0:
            self._stop()
            return DispatchOutcome(stage=DispatchStage.GLOBAL, action=ActionId.STOP, confidence=1.0)

        context_match = self._context_resolver.resolve_context(text, route)
        if context_match.confidence > self._acceptance_threshold:
            await self._dispatch_context(context_match, text, route, locale)
            return DispatchOutcome(
                stage=DispatchStage.CONTEXT,
                action=context_match.action,
                confidence=context_match.confidence,
            )

        if self._intent_detector.is_add_request(text):
            return await self._dispatch_intent(text, locale)

        if global_match.confidence <= self._acceptance_threshold:
            self._logger.debug(
                "utterance_ignored",
                extra={"utterance": text, "best_action": global_match.action.value, "confidence": global_match.confidence},
            )
            return DispatchOutcome(stage=DispatchStage.IGNORED, confidence=global_match.confidence)

        self._clear_utterance()
        self._haptics.pulse(HapticPattern.ACTION)
        self._logger.info(
            "command_dispatched",
            extra={"action": global_match.action.value, "confidence": global_match.confidence, "route": route},
        )
        await self._perform(global_match.action, route=route, locale=locale, page_content=page_content)
        return DispatchOutcome(stage=DispatchStage.GLOBAL, action=global_match.action, confidence=global_match.confidence)

    def on_route_change(self, route: str) -> None:
        """Drop deferred navigations queued by the page being left."""
        self._route_epoch += 1
        for handle in list(self._pending_timers):
            handle.cancel()
        self._pending_timers.clear()
        self._last_transcript = ""
        self._logger.debug("dispatcher_route_changed", extra={"route": route})

    def close(self) -> None:
        self.on_route_change("")
        for task in list(self._tasks):
            task.cancel()

    async def _dispatch_context(self, match: MatchResult, text: str, route: str, locale: str) -> None:
        self._context_bus.emit(ContextActionEvent(action=match.action, utterance=text, route=route))
        self._haptics.pulse(HapticPattern.ACTION)
        self._clear_utterance()
        self._logger.info(
            "context_action_dispatched",
            extra={"action": match.action.value, "confidence": match.confidence, "route": route},
        )
        await self._butler.announce(prompt("CONTEXT_ACK", locale))

    async def _dispatch_intent(self, text: str, locale: str) -> DispatchOutcome:
        if self._intent_in_flight:
            self._logger.info("intent_extraction_busy", extra={"utterance": text})
            return DispatchOutcome(stage=DispatchStage.INTENT_BUSY)

        self._intent_in_flight = True
        self._clear_utterance()
        try:
            result = await self._intent_service.add_from_utterance(text, locale)
        except Exception:  # noqa: BLE001 - extraction failures are reported by voice.
            self._logger.exception("intent_extraction_failed", extra={"utterance": text})
            result = IntentResult(success=False, voice_feedback=prompt("INTENT_ERROR", locale))
        finally:
            self._intent_in_flight = False

        self._haptics.pulse(HapticPattern.SUCCESS if result.success else HapticPattern.ERROR)
        self._logger.info("intent_extraction_finished", extra={"success": result.success})
        await self._butler.announce(result.voice_feedback)
        return DispatchOutcome(stage=DispatchStage.INTENT, confidence=1.0 if result.success else 0.0)

    async def _perform(self, action: ActionId, *, route: str, locale: str, page_content: str | None) -> None:
        if action == ActionId.STOP:
            self._stop()
            return

        if action == ActionId.REPEAT:
            content = (page_content or "").strip()
            await self._butler.announce(content or prompt("REPEAT_EMPTY", locale))
            return

        if action == ActionId.HELP:
            await self._butler.announce(help_text(locale))
            return

        if action == ActionId.VERIFY_MEDICINE and route == routes.VERIFY_MEDICINE:
            await self._butler.announce(prompt("VERIFY_READY", locale))
            return

        if action == ActionId.BACK:
            await self._confirm_then(action, locale, self._navigator.back)
            return

        target = NAVIGATION_TARGETS.get(action)
        if target is None:
            return
        await self._confirm_then(action, locale, self._navigator.navigate, target)

    async def _confirm_then(self, action: ActionId, locale: str, callback: Callable[..., Any], *args: Any) -> None:
        epoch = self._route_epoch
        await self._butler.announce(confirmation_for(action, locale))
        if epoch != self._route_epoch:
            self._logger.info("deferred_navigation_dropped", extra={"action": action.value})
            return
        self._defer(callback, *args)

    def _defer(self, callback: Callable[..., Any], *args: Any) -> None:
        loop = asyncio.get_running_loop()
        handle: asyncio.TimerHandle | None = None

        def _fire() -> None:
            self._pending_timers.discard(handle)
            try:
                callback(*args)
            except Exception:  # noqa: BLE001 - navigation is an external collaborator.
                self._logger.exception("deferred_navigation_failed")

        handle = loop.call_later(self._timings.navigation_delay_seconds, _fire)
        self._pending_timers.add(handle)

    def _stop(self) -> None:
        self._speech.stop_speaking()
        self._butler.stop_auto_listening()
        self._clear_utterance()
        self._logger.info("speech_stopped_by_user")

    def _clear_utterance(self) -> None:
        self._speech.reset_transcript()
        self._last_transcript = ""
