from __future__ import annotations

import pytest

from saarthi_voice.locales import DEFAULT_LOCALE, Locale, coerce_locale, localize
from saarthi_voice.models import ActionId
from saarthi_voice.voice.prompts import PROMPTS, confirmation_for, help_text, prompt


def test_localize_prefers_requested_locale() -> None:
    table = {"en-US": "Hello", "hi-IN": "नमस्ते"}

    assert localize(table, "hi-IN") == "नमस्ते"
    assert localize(table, Locale.HI_IN) == "नमस्ते"


def test_localize_falls_back_when_locale_missing() -> None:
    table = {"en-US": "Hello", "hi-IN": "नमस्ते"}

    assert localize(table, "mr-IN") == "Hello"
    assert localize(table, None) == "Hello"
    assert localize(table, "mr-IN", fallback="hi-IN") == "नमस्ते"


def test_localize_raises_when_fallback_also_missing() -> None:
    with pytest.raises(KeyError):
        localize({"hi-IN": "नमस्ते"}, "mr-IN")


def test_coerce_locale_defaults_unknown_tags() -> None:
    assert coerce_locale("mr-IN") is Locale.MR_IN
    assert coerce_locale("fr-FR") is DEFAULT_LOCALE
    assert coerce_locale("") is DEFAULT_LOCALE


def test_every_prompt_covers_every_locale() -> None:
    for key, table in PROMPTS.items():
        assert {locale.value for locale in Locale} <= set(table), key


def test_confirmations_exist_for_navigation_actions() -> None:
    assert confirmation_for(ActionId.HOME, "en-US") == "Taking you home"
    assert confirmation_for(ActionId.HOME, "hi-IN") == prompt("HOME", "hi-IN")


def test_help_text_lists_one_keyword_per_command() -> None:
    text = help_text("en-US")

    assert text.startswith("You can say:")
    assert "home" in text
    assert "medicines" in text
    assert help_text("mr-IN").startswith(prompt("HELP_LEAD", "mr-IN"))
