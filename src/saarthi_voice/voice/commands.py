"""Static global and route-scoped command tables."""

from __future__ import annotations

from saarthi_voice import routes
from saarthi_voice.locales import Locale
from saarthi_voice.models import ActionId, CommandDefinition

EN, HI, MR = Locale.EN_US, Locale.HI_IN, Locale.MR_IN


def _command(action: ActionId, en: tuple[str, ...], hi: tuple[str, ...], mr: tuple[str, ...]) -> CommandDefinition:
    return CommandDefinition(action=action, keywords={EN: en, HI: hi, MR: mr})


# Exact matching walks this table in order, so earlier entries win shared substrings
# ("check medicine" must resolve before "medicine", "alarm" before reminders).
GLOBAL_COMMANDS: tuple[CommandDefinition, ...] = (
    _command(
        ActionId.STOP,
        ("stop", "quiet", "silence", "shut up"),
        ("रुको", "चुप", "बंद करो"),
        ("थांबा", "शांत", "बंद कर"),
    ),
    _command(
        ActionId.ALARM,
        ("emergency", "alarm", "sos", "urgent"),
        ("आपातकाल", "अलार्म", "बचाओ"),
        ("आणीबाणी", "अलार्म", "वाचवा"),
    ),
    _command(
        ActionId.VERIFY_MEDICINE,
        ("verify", "check medicine", "check pill", "identify"),
        ("जांच", "पहचान"),
        ("तपास", "ओळख"),
    ),
    _command(
        ActionId.HOME,
        ("home", "dashboard", "main", "go home"),
        ("होम", "घर", "डैशबोर्ड"),
        ("घर", "होम", "डॅशबोर्ड"),
    ),
    _command(
        ActionId.SCAN,
        ("scan", "camera", "photo", "picture"),
        ("स्कैन", "कैमरा", "फोटो"),
        ("स्कॅन", "कॅमेरा", "फोटो"),
    ),
    _command(
        ActionId.MEDICINES,
        ("medicines", "pills", "medicine", "pill", "my medicines"),
        ("दवाई", "दवाइयां", "गोली", "गोलियां"),
        ("औषध", "औषधे", "गोळी", "गोळ्या"),
    ),
    _command(
        ActionId.REMINDERS,
        ("reminders", "reminder", "alerts"),
        ("रिमाइंडर", "याद"),
        ("रिमाइंडर", "आठवण"),
    ),
    _command(
        ActionId.BACK,
        ("back", "return", "go back", "previous"),
        ("वापस", "पीछे", "लौटो"),
        ("मागे", "परत", "मागे जा"),
    ),
    _command(
        ActionId.REPEAT,
        ("repeat", "again", "what", "pardon"),
        ("दोहराओ", "फिर से", "क्या"),
        ("पुन्हा", "पुन्हा सांगा"),
    ),
    _command(
        ActionId.HELP,
        ("help", "commands", "assist"),
        ("मदद", "सहायता", "हेल्प"),
        ("मदत", "साहाय्य", "हेल्प"),
    ),
)


CONTEXT_COMMANDS: dict[str, tuple[CommandDefinition, ...]] = {
    routes.SCAN: (
        _command(
            ActionId.CAPTURE,
            ("capture", "take photo", "take picture", "click"),
            ("खींचो", "फोटो लो", "क्लिक"),
            ("काढा", "फोटो घ्या", "क्लिक"),
        ),
        _command(
            ActionId.RETAKE,
            ("retake", "try again", "one more time"),
            ("दोबारा", "फिर से लो"),
            ("पुन्हा घ्या", "परत काढा"),
        ),
    ),
    routes.VERIFY_MEDICINE: (
        _command(
            ActionId.CONFIRM,
            ("correct", "yes", "right one", "check"),
            ("हाँ", "हां", "सही"),
            ("होय", "बरोबर"),
        ),
        _command(
            ActionId.CANCEL,
            ("wrong", "cancel", "not this"),
            ("गलत", "नहीं"),
            ("चूक", "नाही"),
        ),
    ),
    routes.ALARM: (
        _command(
            ActionId.TAKEN,
            ("taken", "took it", "done", "i took"),
            ("ले ली", "खा ली", "हो गया"),
            ("घेतली", "झाले"),
        ),
        _command(
            ActionId.SNOOZE,
            ("snooze", "later", "remind me later"),
            ("बाद में", "थोड़ी देर"),
            ("नंतर", "थोड्या वेळाने"),
        ),
    ),
}
