"""Localized spoken prompts."""

from __future__ import annotations

from typing import Sequence

from saarthi_voice.locales import DEFAULT_LOCALE, Locale, coerce_locale, localize
from saarthi_voice.models import ActionId, CommandDefinition

from .commands import GLOBAL_COMMANDS

PROMPTS: dict[str, dict[str, str]] = {
    "HOME": {
        "en-US": "Taking you home",
        "hi-IN": "आपको होम पर ले जा रहे हैं",
        "mr-IN": "तुम्हाला होमवर नेत आहे",
    },
    "SCAN": {
        "en-US": "Opening the camera to scan your prescription",
        "hi-IN": "पर्चा स्कैन करने के लिए कैमरा खोल रहे हैं",
        "mr-IN": "प्रिस्क्रिप्शन स्कॅन करण्यासाठी कॅमेरा उघडत आहे",
    },
    "MEDICINES": {
        "en-US": "Showing your medicines",
        "hi-IN": "आपकी दवाइयां दिखा रहे हैं",
        "mr-IN": "तुमची औषधे दाखवत आहे",
    },
    "REMINDERS": {
        "en-US": "Opening your reminders",
        "hi-IN": "आपके रिमाइंडर खोल रहे हैं",
        "mr-IN": "तुमच्या आठवणी उघडत आहे",
    },
    "BACK": {
        "en-US": "Going back",
        "hi-IN": "वापस जा रहे हैं",
        "mr-IN": "मागे जात आहे",
    },
    "REPEAT_EMPTY": {
        "en-US": "There is nothing to repeat right now",
        "hi-IN": "अभी दोहराने के लिए कुछ नहीं है",
        "mr-IN": "आत्ता पुन्हा सांगण्यासारखे काही नाही",
    },
    "HELP_LEAD": {
        "en-US": "You can say",
        "hi-IN": "आप बोल सकते हैं",
        "mr-IN": "तुम्ही म्हणू शकता",
    },
    "VERIFY_MEDICINE": {
        "en-US": "Let's check your medicine. Hold it in front of the camera",
        "hi-IN": "चलिए आपकी दवाई जांचते हैं। उसे कैमरे के सामने रखें",
        "mr-IN": "चला तुमचे औषध तपासूया. ते कॅमेऱ्यासमोर धरा",
    },
    "VERIFY_READY": {
        "en-US": "I am ready. Show me the medicine",
        "hi-IN": "मैं तैयार हूं। दवाई दिखाइए",
        "mr-IN": "मी तयार आहे. औषध दाखवा",
    },
    "ALARM": {
        "en-US": "Opening the emergency alarm",
        "hi-IN": "आपातकालीन अलार्म खोल रहे हैं",
        "mr-IN": "आपत्कालीन अलार्म उघडत आहे",
    },
    "CONTEXT_ACK": {
        "en-US": "Okay",
        "hi-IN": "ठीक है",
        "mr-IN": "ठीक आहे",
    },
    "IDLE_NUDGE": {
        "en-US": "I'm listening. Please speak now",
        "hi-IN": "मैं सुन रहा हूं। कृपया अब बोलिए",
        "mr-IN": "मी ऐकत आहे. कृपया आता बोला",
    },
    "INTENT_ERROR": {
        "en-US": "Something went wrong. Please try again.",
        "hi-IN": "कुछ गलत हो गया। कृपया फिर से कोशिश करें।",
        "mr-IN": "काहीतरी चुकले. कृपया पुन्हा प्रयत्न करा.",
    },
    "INTENT_UNAVAILABLE": {
        "en-US": "Adding medicines by voice is not available right now.",
        "hi-IN": "अभी आवाज़ से दवाई जोड़ना उपलब्ध नहीं है।",
        "mr-IN": "सध्या आवाजाने औषध जोडणे उपलब्ध नाही.",
    },
    "RECOGNITION_UNAVAILABLE": {
        "en-US": "Voice input is not available on this device",
        "hi-IN": "इस डिवाइस पर आवाज़ से इनपुट उपलब्ध नहीं है",
        "mr-IN": "या उपकरणावर आवाजाने इनपुट उपलब्ध नाही",
    },
}

_ACTION_PROMPTS = {
    ActionId.HOME: "HOME",
    ActionId.SCAN: "SCAN",
    ActionId.MEDICINES: "MEDICINES",
    ActionId.REMINDERS: "REMINDERS",
    ActionId.BACK: "BACK",
    ActionId.VERIFY_MEDICINE: "VERIFY_MEDICINE",
    ActionId.ALARM: "ALARM",
}


def prompt(key: str, locale: str | Locale | None) -> str:
    return localize(PROMPTS[key], locale, DEFAULT_LOCALE)


def confirmation_for(action: ActionId, locale: str | Locale | None) -> str:
    """Spoken confirmation preceding a navigation-style action."""
    return prompt(_ACTION_PROMPTS[action], locale)


def help_text(locale: str | Locale | None, commands: Sequence[CommandDefinition] = GLOBAL_COMMANDS) -> str:
    """Enumerate one spoken keyword per global command in the given locale."""
    resolved = coerce_locale(locale)
    words = []
    for command in commands:
        keywords = command.keywords.get(resolved) or command.keywords.get(DEFAULT_LOCALE, ())
        if keywords:
            words.append(keywords[0])
    return f"{prompt('HELP_LEAD', resolved)}: {', '.join(words)}."
