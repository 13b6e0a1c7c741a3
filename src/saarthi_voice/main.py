"""CLI startup entrypoint for Saarthi Voice."""

from __future__ import annotations

import asyncio

import typer
from rich import print

from saarthi_voice import routes
from saarthi_voice.config import settings
from saarthi_voice.locales import Locale, coerce_locale
from saarthi_voice.models import CommandSuggestion, MatchResult
from saarthi_voice.telemetry.logging import configure_logging
from saarthi_voice.voice.commands import CONTEXT_COMMANDS, GLOBAL_COMMANDS
from saarthi_voice.voice.intents import MedicineAddIntentDetector
from saarthi_voice.voice.matcher import ContextCommandResolver, FuzzyCommandMatcher
from saarthi_voice.voice.prompts import help_text

app = typer.Typer(help="Saarthi voice interaction engine")


def _match_payload(result: MatchResult) -> dict:
    return {"action": result.action.value, "confidence": result.confidence}


def _suggestion_payload(suggestion: CommandSuggestion) -> dict:
    return {"action": suggestion.action.value, "keyword": suggestion.keyword, "confidence": suggestion.confidence}


@app.command()
def start() -> None:
    """Show runtime configuration."""
    print(
        {
            "app_name": settings.app_name,
            "default_locale": settings.default_locale,
            "voice_enabled": settings.voice_enabled,
            "echo_buffer_seconds": settings.echo_buffer_seconds,
            "idle_prompt_seconds": settings.idle_prompt_seconds,
            "navigation_delay_seconds": settings.navigation_delay_seconds,
            "acceptance_threshold": settings.acceptance_threshold,
            "excluded_routes": settings.excluded_routes,
        }
    )


@app.command("match")
def match_utterance(
    utterance: str,
    route: str = typer.Option(routes.DASHBOARD, help="Route the utterance is heard on"),
    limit: int = typer.Option(3, help="How many fuzzy suggestions to show"),
) -> None:
    """Show how an utterance resolves without performing any effect."""
    matcher = FuzzyCommandMatcher(score_floor=settings.fuzzy_score_floor)
    resolver = ContextCommandResolver(score_floor=settings.fuzzy_score_floor)

    context_result = resolver.resolve_context(utterance, route)
    global_result = matcher.match(utterance)
    if route in settings.excluded_routes:
        stage = "excluded"
    elif context_result.confidence > settings.acceptance_threshold:
        stage = "context"
    elif MedicineAddIntentDetector().is_add_request(utterance):
        stage = "intent"
    elif global_result.confidence > settings.acceptance_threshold:
        stage = "global"
    else:
        stage = "ignored"

    print(
        {
            "utterance": utterance,
            "route": route,
            "context": _match_payload(context_result),
            "global": _match_payload(global_result),
            "stage": stage,
            "suggestions": [_suggestion_payload(item) for item in matcher.suggest(utterance, limit=limit)],
        }
    )


@app.command("commands")
def list_commands(locale: str = typer.Option(settings.default_locale, help="en-US, hi-IN or mr-IN")) -> None:
    """Print the spoken help text and the keyword tables for a locale."""
    resolved = coerce_locale(locale)
    print({"help": help_text(resolved)})
    print({command.action.value: list(command.keywords.get(resolved, ())) for command in GLOBAL_COMMANDS})
    print(
        {
            route: {command.action.value: list(command.keywords.get(resolved, ())) for command in commands}
            for route, commands in CONTEXT_COMMANDS.items()
        }
    )


@app.command("voice-chat")
def voice_chat(
    locale: str = typer.Option(settings.default_locale, help="en-US, hi-IN or mr-IN"),
    route: str = typer.Option(routes.DASHBOARD, help="Route to start on"),
    phrase_time_limit: float = typer.Option(settings.phrase_time_limit, help="Per-utterance capture limit in seconds"),
) -> None:
    """Run the live voice loop with local STT/TTS backends."""
    from saarthi_voice.assistant import VoiceCompanion
    from saarthi_voice.navigation import HistoryNavigator

    try:
        from saarthi_voice.voice.stt_speechrecognition import SpeechRecognitionStream
        from saarthi_voice.voice.tts_pyttsx3 import Pyttsx3Synthesizer
    except RuntimeError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)
    except ImportError:
        print({"error": "Voice extras are missing. Install with: pip install 'saarthi-voice[voice]'"})
        raise typer.Exit(code=1)

    try:
        recognizer = SpeechRecognitionStream(phrase_time_limit=phrase_time_limit)
        synthesizer = Pyttsx3Synthesizer()
    except RuntimeError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)

    configure_logging(settings.log_level)

    async def _run() -> None:
        companion = VoiceCompanion(
            recognizer=recognizer,
            synthesizer=synthesizer,
            navigator=HistoryNavigator(initial_route=route),
        )
        companion.set_locale(locale)
        companion.speech.subscribe(lambda text: print({"heard": text, "route": companion.state.route}))
        companion.navigator.add_listener(lambda new_route: print({"route": new_route}))

        print({"voice_chat": "started", "locale": companion.state.locale, "hint": "Press Ctrl+C to quit."})
        try:
            await companion.enter_page("Home Screen", "Say Scan to read a prescription")
            while True:
                if companion.speech.unavailable:
                    print({"notice": companion.speech.notice})
                    break
                if not companion.speech.is_listening and not companion.speech.is_speaking:
                    companion.speech.start_listening()
                await asyncio.sleep(0.5)
        finally:
            companion.close()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        print({"voice_chat": "stopped"})


@app.command("locales")
def list_locales() -> None:
    """List supported locales."""
    print([locale.value for locale in Locale])


if __name__ == "__main__":
    app()
