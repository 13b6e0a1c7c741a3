"""Voice interaction engine: matching, dispatch, turn-taking and speech I/O."""

from .butler import SessionState, VoiceButler
from .dispatcher import CommandDispatcher, DispatchOutcome, DispatchStage
from .events import ContextActionBus
from .feedback import LoggingHaptics
from .intents import MedicineAddIntentDetector, UnavailableIntentService
from .interfaces import (
    HapticFeedback,
    HapticPattern,
    MedicineIntentService,
    Navigator,
    SpeechOptions,
    SpeechRecognizer,
    SpeechSynthesizer,
    SynthesisVoice,
)
from .matcher import ContextCommandResolver, FuzzyCommandMatcher
from .speech_io import SpeechIOAdapter, VoiceOutputConfig

__all__ = [
    "CommandDispatcher",
    "ContextActionBus",
    "ContextCommandResolver",
    "DispatchOutcome",
    "DispatchStage",
    "FuzzyCommandMatcher",
    "HapticFeedback",
    "HapticPattern",
    "LoggingHaptics",
    "MedicineAddIntentDetector",
    "MedicineIntentService",
    "Navigator",
    "SessionState",
    "SpeechIOAdapter",
    "SpeechOptions",
    "SpeechRecognizer",
    "SpeechSynthesizer",
    "SynthesisVoice",
    "UnavailableIntentService",
    "VoiceButler",
    "VoiceOutputConfig",
]
