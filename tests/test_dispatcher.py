from __future__ import annotations

import asyncio

import pytest

from saarthi_voice import routes
from saarthi_voice.config import VoiceTimings
from saarthi_voice.models import ActionId, ContextActionEvent, IntentResult
from saarthi_voice.voice.butler import VoiceButler
from saarthi_voice.voice.dispatcher import CommandDispatcher, DispatchStage
from saarthi_voice.voice.interfaces import HapticPattern
from saarthi_voice.voice.prompts import prompt
from saarthi_voice.voice.speech_io import SpeechIOAdapter


class GatedIntentService:
    def __init__(self) -> None:
        self.calls: list[str] = []
        self.release: asyncio.Event | None = None

    async def add_from_utterance(self, utterance: str, locale: str) -> IntentResult:
        self.calls.append(utterance)
        if self.release is not None:
            await self.release.wait()
        return IntentResult(success=True, voice_feedback="Added Paracetamol 500 mg")


class BrokenIntentService:
    async def add_from_utterance(self, utterance: str, locale: str) -> IntentResult:
        raise RuntimeError("extraction backend down")


def _dispatcher(recognizer, synthesizer, navigator, haptics, timings, **kwargs) -> CommandDispatcher:
    speech = SpeechIOAdapter(recognizer, synthesizer, route_cooldown_seconds=0.0)
    butler = VoiceButler(speech, timings=timings)
    return CommandDispatcher(
        speech=speech,
        butler=butler,
        navigator=navigator,
        haptics=haptics,
        timings=timings,
        **kwargs,
    )


def test_global_command_confirms_then_navigates(recognizer, synthesizer, navigator, haptics, timings) -> None:
    dispatcher = _dispatcher(recognizer, synthesizer, navigator, haptics, timings)

    async def scenario():
        outcome = await dispatcher.dispatch("go home please", route=routes.MEDICINES, locale="en-US")
        assert navigator.calls == []
        assert dispatcher.pending_navigations == 1
        await asyncio.sleep(timings.navigation_delay_seconds + 0.03)
        return outcome

    outcome = asyncio.run(scenario())

    assert outcome.stage == DispatchStage.GLOBAL
    assert outcome.action == ActionId.HOME
    assert outcome.confidence == 1.0
    assert synthesizer.spoken == ["Taking you home"]
    assert navigator.calls == [("navigate", routes.DASHBOARD)]
    assert haptics.pulses == [HapticPattern.ACTION]


def test_misheard_command_still_navigates(recognizer, synthesizer, navigator, haptics, timings) -> None:
    dispatcher = _dispatcher(recognizer, synthesizer, navigator, haptics, timings)

    async def scenario():
        outcome = await dispatcher.dispatch("scaan", route=routes.MEDICINES, locale="en-US")
        await asyncio.sleep(timings.navigation_delay_seconds + 0.03)
        return outcome

    outcome = asyncio.run(scenario())

    assert outcome.action == ActionId.SCAN
    assert navigator.calls == [("navigate", routes.SCAN)]


def test_confirmation_uses_utterance_locale(recognizer, synthesizer, navigator, haptics, timings) -> None:
    dispatcher = _dispatcher(recognizer, synthesizer, navigator, haptics, timings)

    async def scenario() -> None:
        await dispatcher.dispatch("घर चलो", route=routes.MEDICINES, locale="hi-IN")
        await asyncio.sleep(timings.navigation_delay_seconds + 0.03)

    asyncio.run(scenario())

    assert synthesizer.spoken == [prompt("HOME", "hi-IN")]
    assert navigator.calls == [("navigate", routes.DASHBOARD)]


def test_low_confidence_is_silently_ignored(recognizer, synthesizer, navigator, haptics, timings) -> None:
    dispatcher = _dispatcher(recognizer, synthesizer, navigator, haptics, timings)

    outcome = asyncio.run(dispatcher.dispatch("xyzzy", route=routes.DASHBOARD, locale="en-US"))

    assert outcome.stage == DispatchStage.IGNORED
    assert synthesizer.spoken == []
    assert navigator.calls == []
    assert haptics.pulses == []


def test_excluded_routes_never_act(recognizer, synthesizer, navigator, haptics, timings) -> None:
    dispatcher = _dispatcher(recognizer, synthesizer, navigator, haptics, timings)

    async def scenario():
        first = await dispatcher.dispatch("go home", route=routes.REGISTER, locale="en-US")
        second = await dispatcher.dispatch("stop", route=routes.LANGUAGE, locale="en-US")
        await asyncio.sleep(timings.navigation_delay_seconds + 0.03)
        return first, second

    first, second = asyncio.run(scenario())

    assert first.stage == DispatchStage.EXCLUDED
    assert second.stage == DispatchStage.EXCLUDED
    assert synthesizer.spoken == []
    assert navigator.calls == []


def test_context_action_takes_precedence_over_global(recognizer, synthesizer, navigator, haptics, timings) -> None:
    dispatcher = _dispatcher(recognizer, synthesizer, navigator, haptics, timings)
    received: list[ContextActionEvent] = []
    dispatcher.context_bus.subscribe(routes.SCAN, received.append)

    async def scenario():
        outcome = await dispatcher.dispatch("take photo", route=routes.SCAN, locale="en-US")
        await asyncio.sleep(timings.navigation_delay_seconds + 0.03)
        return outcome

    outcome = asyncio.run(scenario())

    assert outcome.stage == DispatchStage.CONTEXT
    assert outcome.action == ActionId.CAPTURE
    assert received == [ContextActionEvent(action=ActionId.CAPTURE, utterance="take photo", route=routes.SCAN)]
    assert synthesizer.spoken == ["Okay"]
    assert navigator.calls == []
    assert haptics.pulses == [HapticPattern.ACTION]


def test_repeat_reads_page_content_or_says_nothing_to_repeat(
    recognizer, synthesizer, navigator, haptics, timings
) -> None:
    dispatcher = _dispatcher(recognizer, synthesizer, navigator, haptics, timings)

    async def scenario() -> None:
        await dispatcher.dispatch(
            "repeat",
            route=routes.MEDICINES,
            locale="en-US",
            page_content="  You have two doses left today ",
        )
        await dispatcher.dispatch("pardon", route=routes.MEDICINES, locale="en-US", page_content="")

    asyncio.run(scenario())

    assert synthesizer.spoken == ["You have two doses left today", "There is nothing to repeat right now"]
    assert navigator.calls == []


def test_help_lists_commands(recognizer, synthesizer, navigator, haptics, timings) -> None:
    dispatcher = _dispatcher(recognizer, synthesizer, navigator, haptics, timings)

    outcome = asyncio.run(dispatcher.dispatch("help", route=routes.DASHBOARD, locale="en-US"))

    assert outcome.action == ActionId.HELP
    assert synthesizer.spoken[0].startswith("You can say:")


def test_verify_on_verify_page_signals_readiness(recognizer, synthesizer, navigator, haptics, timings) -> None:
    dispatcher = _dispatcher(recognizer, synthesizer, navigator, haptics, timings)

    async def scenario() -> None:
        await dispatcher.dispatch("verify", route=routes.VERIFY_MEDICINE, locale="en-US")
        await asyncio.sleep(timings.navigation_delay_seconds + 0.03)

    asyncio.run(scenario())

    assert synthesizer.spoken == ["I am ready. Show me the medicine"]
    assert navigator.calls == []


def test_verify_elsewhere_navigates_to_verification(recognizer, synthesizer, navigator, haptics, timings) -> None:
    dispatcher = _dispatcher(recognizer, synthesizer, navigator, haptics, timings)

    async def scenario() -> None:
        await dispatcher.dispatch("verify", route=routes.DASHBOARD, locale="en-US")
        await asyncio.sleep(timings.navigation_delay_seconds + 0.03)

    asyncio.run(scenario())

    assert navigator.calls == [("navigate", routes.VERIFY_MEDICINE)]


def test_back_pops_history(recognizer, synthesizer, navigator, haptics, timings) -> None:
    dispatcher = _dispatcher(recognizer, synthesizer, navigator, haptics, timings)

    async def scenario() -> None:
        await dispatcher.dispatch("go back", route=routes.MEDICINES, locale="en-US")
        await asyncio.sleep(timings.navigation_delay_seconds + 0.03)

    asyncio.run(scenario())

    assert synthesizer.spoken == ["Going back"]
    assert navigator.calls == [("back",)]


def test_stop_silences_speech_regardless_of_threshold(recognizer, synthesizer, navigator, haptics, timings) -> None:
    synthesizer.hold_seconds = 2.0
    dispatcher = _dispatcher(recognizer, synthesizer, navigator, haptics, timings, acceptance_threshold=1.0)
    butler = dispatcher._butler

    async def scenario():
        talking = asyncio.create_task(butler.announce("Here is a very long explanation of your schedule"))
        await asyncio.sleep(0.05)
        outcome = await dispatcher.dispatch("stop", route=routes.MEDICINES, locale="en-US")
        await asyncio.wait_for(talking, timeout=1.0)
        return outcome

    outcome = asyncio.run(scenario())

    assert outcome.stage == DispatchStage.GLOBAL
    assert outcome.action == ActionId.STOP
    assert synthesizer.cancels >= 2
    assert synthesizer.spoken == ["Here is a very long explanation of your schedule"]
    assert butler.is_auto_listening is False


def test_transcript_gate_drops_repeated_text(recognizer, synthesizer, navigator, haptics, timings) -> None:
    dispatcher = _dispatcher(recognizer, synthesizer, navigator, haptics, timings)

    async def scenario() -> None:
        first = dispatcher.handle_transcript("xyzzy", route=routes.DASHBOARD, locale="en-US")
        assert first is not None
        assert dispatcher.handle_transcript("xyzzy", route=routes.DASHBOARD, locale="en-US") is None
        assert dispatcher.handle_transcript("   ", route=routes.DASHBOARD, locale="en-US") is None
        await first

        help_task = dispatcher.handle_transcript("help", route=routes.DASHBOARD, locale="en-US")
        await help_task
        # A dispatched command clears the gate, so saying it again acts again.
        again = dispatcher.handle_transcript("help", route=routes.DASHBOARD, locale="en-US")
        assert again is not None
        await again

    asyncio.run(scenario())

    assert len(synthesizer.spoken) == 2


def test_route_change_cancels_deferred_navigation(recognizer, synthesizer, navigator, haptics) -> None:
    timings = VoiceTimings(echo_buffer_seconds=0.01, idle_prompt_seconds=0.05, navigation_delay_seconds=0.2)
    dispatcher = _dispatcher(recognizer, synthesizer, navigator, haptics, timings)

    async def scenario() -> None:
        await dispatcher.dispatch("open reminders", route=routes.DASHBOARD, locale="en-US")
        assert dispatcher.pending_navigations == 1
        dispatcher.on_route_change(routes.SCAN)
        assert dispatcher.pending_navigations == 0
        await asyncio.sleep(0.25)

    asyncio.run(scenario())

    assert navigator.calls == []


def test_route_change_during_confirmation_drops_navigation(
    recognizer, synthesizer, navigator, haptics, timings
) -> None:
    synthesizer.hold_seconds = 2.0
    dispatcher = _dispatcher(recognizer, synthesizer, navigator, haptics, timings)

    async def scenario() -> None:
        task = asyncio.create_task(dispatcher.dispatch("my medicines", route=routes.DASHBOARD, locale="en-US"))
        await asyncio.sleep(0.05)
        dispatcher.on_route_change(routes.SCAN)
        dispatcher._speech.stop_speaking()
        await asyncio.wait_for(task, timeout=1.0)
        await asyncio.sleep(timings.navigation_delay_seconds + 0.03)

    asyncio.run(scenario())

    assert navigator.calls == []
    assert dispatcher.pending_navigations == 0


def test_medicine_intent_is_single_flight(recognizer, synthesizer, navigator, haptics, timings) -> None:
    service = GatedIntentService()
    dispatcher = _dispatcher(recognizer, synthesizer, navigator, haptics, timings, intent_service=service)

    async def scenario():
        service.release = asyncio.Event()
        first = asyncio.create_task(
            dispatcher.dispatch("add paracetamol 500 mg every morning", route=routes.MEDICINES, locale="en-US")
        )
        await asyncio.sleep(0.01)
        assert dispatcher.intent_in_flight is True

        busy = await dispatcher.dispatch("add metformin twice daily", route=routes.MEDICINES, locale="en-US")
        service.release.set()
        return await first, busy

    outcome, busy = asyncio.run(scenario())

    assert busy.stage == DispatchStage.INTENT_BUSY
    assert outcome.stage == DispatchStage.INTENT
    assert outcome.confidence == 1.0
    assert service.calls == ["add paracetamol 500 mg every morning"]
    assert haptics.pulses == [HapticPattern.SUCCESS]
    assert synthesizer.spoken == ["Added Paracetamol 500 mg"]
    assert dispatcher.intent_in_flight is False


def test_intent_failure_is_spoken_with_error_haptic(recognizer, synthesizer, navigator, haptics, timings) -> None:
    dispatcher = _dispatcher(
        recognizer, synthesizer, navigator, haptics, timings, intent_service=BrokenIntentService()
    )

    outcome = asyncio.run(dispatcher.dispatch("I take metformin twice daily", route=routes.DASHBOARD, locale="en-US"))

    assert outcome.stage == DispatchStage.INTENT
    assert outcome.confidence == 0.0
    assert haptics.pulses == [HapticPattern.ERROR]
    assert synthesizer.spoken == ["Something went wrong. Please try again."]
    assert dispatcher.intent_in_flight is False


def test_missing_intent_backend_reports_unavailable(recognizer, synthesizer, navigator, haptics, timings) -> None:
    dispatcher = _dispatcher(recognizer, synthesizer, navigator, haptics, timings)

    asyncio.run(dispatcher.dispatch("add aspirin 75 mg at night", route=routes.DASHBOARD, locale="en-US"))

    assert synthesizer.spoken == [prompt("INTENT_UNAVAILABLE", "en-US")]
    assert haptics.pulses == [HapticPattern.ERROR]


def test_take_me_home_is_navigation_not_intent(recognizer, synthesizer, navigator, haptics, timings) -> None:
    service = GatedIntentService()
    dispatcher = _dispatcher(recognizer, synthesizer, navigator, haptics, timings, intent_service=service)

    outcome = asyncio.run(dispatcher.dispatch("take me home", route=routes.MEDICINES, locale="en-US"))

    assert outcome.action == ActionId.HOME
    assert service.calls == []


@pytest.mark.parametrize(
    "utterance",
    [
        "is it so",
        "yes",
        "how are you today",
        "turn on the light",
        "the weather is nice",
        "आज मौसम अच्छा है",
        "आज हवा छान आहे",
    ],
)
def test_small_talk_is_ignored_without_navigation(
    utterance: str, recognizer, synthesizer, navigator, haptics, timings
) -> None:
    dispatcher = _dispatcher(recognizer, synthesizer, navigator, haptics, timings)

    async def scenario():
        outcome = await dispatcher.dispatch(utterance, route=routes.DASHBOARD, locale="en-US")
        await asyncio.sleep(timings.navigation_delay_seconds + 0.03)
        return outcome

    outcome = asyncio.run(scenario())

    assert outcome.stage == DispatchStage.IGNORED
    assert navigator.calls == []
    assert synthesizer.spoken == []
    assert haptics.pulses == []


def test_asking_to_see_night_medicines_is_not_an_add_request(
    recognizer, synthesizer, navigator, haptics, timings
) -> None:
    service = GatedIntentService()
    dispatcher = _dispatcher(recognizer, synthesizer, navigator, haptics, timings, intent_service=service)

    async def scenario():
        outcome = await dispatcher.dispatch("मुझे रात की दवाई दिखाओ", route=routes.DASHBOARD, locale="hi-IN")
        await asyncio.sleep(timings.navigation_delay_seconds + 0.03)
        return outcome

    outcome = asyncio.run(scenario())

    assert outcome.action == ActionId.MEDICINES
    assert service.calls == []
    assert navigator.calls == [("navigate", routes.MEDICINES)]
