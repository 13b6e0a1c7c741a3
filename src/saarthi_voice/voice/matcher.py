"""Exact-then-fuzzy command matching for global and route-scoped vocabularies."""

from __future__ import annotations

from typing import Mapping, Sequence

from rapidfuzz import fuzz, process

from saarthi_voice.models import ActionId, CommandDefinition, CommandSuggestion, MatchResult

from .commands import CONTEXT_COMMANDS, GLOBAL_COMMANDS

DEFAULT_SCORE_FLOOR = 82.0
MIN_FRAGMENT_LENGTH = 4


def normalize_utterance(utterance: str | None) -> str:
    """Lower-case and trim an utterance, collapsing inner whitespace."""
    if not utterance:
        return ""
    return " ".join(utterance.lower().split())


class FuzzyCommandMatcher:
    """Scores an utterance against a command table.

    Exact substring hits win outright at confidence 1.0, in table order. Only when
    none is found are the utterance's word windows, as long as the longest keyword,
    scored against a flat keyword index with RapidFuzz's plain ratio. Whole windows
    are compared to whole keywords, so a long sentence that merely shares a few
    letters with a short keyword stays below the floor. The matcher never decides
    whether a result is good enough to act on.
    """

    def __init__(
        self,
        commands: Sequence[CommandDefinition] = GLOBAL_COMMANDS,
        *,
        score_floor: float = DEFAULT_SCORE_FLOOR,
    ) -> None:
        self._commands = tuple(commands)
        self._score_floor = score_floor
        self._exact: list[tuple[ActionId, tuple[str, ...]]] = [
            (command.action, tuple(keyword.lower() for keyword in command.all_keywords()))
            for command in self._commands
        ]
        self._index: list[tuple[str, ActionId]] = [
            (keyword, action) for action, keywords in self._exact for keyword in keywords
        ]
        self._choices = [keyword for keyword, _ in self._index]
        self._max_words = max((len(keyword.split()) for keyword in self._choices), default=1)

    @property
    def commands(self) -> tuple[CommandDefinition, ...]:
        return self._commands

    def match(self, utterance: str | None) -> MatchResult:
        text = normalize_utterance(utterance)
        if not text:
            return MatchResult.unknown()

        for action, keywords in self._exact:
            if any(keyword in text for keyword in keywords):
                return MatchResult(action=action, confidence=1.0)

        scores = self._fuzzy_scores(text)
        if not scores:
            return MatchResult.unknown()

        # Ties go to the earlier table entry.
        position = max(scores, key=lambda pos: (scores[pos], -pos))
        return MatchResult(action=self._index[position][1], confidence=_confidence(scores[position]))

    def suggest(self, utterance: str | None, limit: int = 3) -> list[CommandSuggestion]:
        """Return the closest keywords for a partial or misheard utterance."""
        scores = self._fuzzy_scores(normalize_utterance(utterance))
        ranked = sorted(scores, key=lambda pos: (-scores[pos], pos))[:limit]
        return [
            CommandSuggestion(
                action=self._index[position][1],
                keyword=self._choices[position],
                confidence=_confidence(scores[position]),
            )
            for position in ranked
        ]

    def _fuzzy_scores(self, text: str) -> dict[int, float]:
        """Best score per keyword position over every word window of ``text``."""
        scores: dict[int, float] = {}
        if not self._choices:
            return scores

        for fragment in _word_windows(text, self._max_words):
            for _, score, position in process.extract(
                fragment,
                self._choices,
                scorer=fuzz.ratio,
                score_cutoff=self._score_floor,
                limit=None,
            ):
                if score > scores.get(position, 0.0):
                    scores[position] = score
        return scores


class ContextCommandResolver:
    """Resolves route-scoped vocabulary before the global table is consulted."""

    def __init__(
        self,
        table: Mapping[str, Sequence[CommandDefinition]] = CONTEXT_COMMANDS,
        *,
        score_floor: float = DEFAULT_SCORE_FLOOR,
    ) -> None:
        self._matchers = {
            route: FuzzyCommandMatcher(commands, score_floor=score_floor)
            for route, commands in table.items()
            if commands
        }

    def routes(self) -> list[str]:
        return list(self._matchers)

    def resolve_context(self, utterance: str | None, route_id: str | None) -> MatchResult:
        matcher = self._matchers.get(route_id or "")
        if matcher is None:
            return MatchResult.unknown()
        return matcher.match(utterance)


def _word_windows(text: str, max_words: int) -> list[str]:
    words = text.split()
    windows = []
    for size in range(1, min(max_words, len(words)) + 1):
        for start in range(len(words) - size + 1):
            window = " ".join(words[start : start + size])
            if len(window) >= MIN_FRAGMENT_LENGTH:
                windows.append(window)
    return windows


def _confidence(score: float) -> float:
    return round(max(0.0, min(100.0, score)) / 100.0, 4)
