"""Failure taxonomy for the voice engine.

None of these are fatal to a hosting application: recognition errors reset the
listening state, synthesis errors are treated as a finished announcement.
"""


class VoiceEngineError(Exception):
    """Base class for voice engine failures."""


class RecognitionUnavailableError(VoiceEngineError):
    """Speech recognition cannot run on this host; permanent for the session."""


class RecognitionError(VoiceEngineError):
    """Transient recognizer failure such as no speech or a dropped request."""

    def __init__(self, code: str, message: str | None = None) -> None:
        super().__init__(message or code)
        self.code = code


class SpeechSynthesisError(VoiceEngineError):
    """Text-to-speech failed before the utterance finished."""
