"""Fuzzy search over workflows with optional tag filtering."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from wf.workflow import Workflow

_FIRST_CHAR_BONUS = 10
_CAMEL_CASE_BONUS = 20
_SEPARATOR_BONUS = 20
_ADJACENT_BONUS = 5
_LEADING_CHAR_PENALTY = -5
_MAX_LEADING_PENALTY = -15
_SEPARATORS = frozenset("/-_ .\\")


@dataclass
class Match:
    """A candidate that matched a pattern.

    ``matched_indexes`` are the character positions of the pattern in ``text``.
    """

    text: str
    index: int
    matched_indexes: list[int] = field(default_factory=list)
    score: int = 0


def parse_query(raw: str) -> tuple[str, str]:
    """Split a query into ``(tag_filter, fuzzy_query)``.

    A leading ``@word`` names the tag; the rest is the fuzzy query.
    """
    raw = raw.strip()
    if not raw.startswith("@"):
        return "", raw
    tag, _, rest = raw[1:].partition(" ")
    return tag, rest.strip()


def searchable_text(workflow: Workflow) -> str:
    """Return the text a workflow is searched by: name, description, tags and command."""
    return " ".join(
        [workflow.name, workflow.description, " ".join(workflow.tags), workflow.command]
    )


def _same_letter(a: str, b: str) -> bool:
    return a == b or a.lower() == b.lower()


def _match(pattern: str, candidate: str, index: int) -> Match | None:
    matched: list[int] = []
    total = 0
    pattern_index = 0
    best_score = -1
    best_index = -1
    adjacent_bonus = 0
    last = ""
    last_index = 0

    for position, char in enumerate(candidate):
        if pattern_index >= len(pattern):
            break
        if _same_letter(char, pattern[pattern_index]):
            score = 0
            if position == 0:
                score += _FIRST_CHAR_BONUS
            if last.islower() and char.isupper():
                score += _CAMEL_CASE_BONUS
            if position != 0 and last in _SEPARATORS:
                score += _SEPARATOR_BONUS
            if matched:
                bonus = adjacent_bonus * 2 + _ADJACENT_BONUS if last_index == matched[-1] else 0
                score += bonus
                adjacent_bonus += bonus
            if score > best_score:
                best_score = score
                best_index = position

        next_pattern = pattern[pattern_index + 1] if pattern_index < len(pattern) - 1 else ""
        next_char = candidate[position + 1] if position + 1 < len(candidate) else ""
        # Commit the best position only when the next pattern letter comes up
        # or the candidate ends, so later and better positions can still win.
        if (not next_char or _same_letter(next_pattern, next_char)) and best_index > -1:
            if not matched:
                best_score += max(best_index * _LEADING_CHAR_PENALTY, _MAX_LEADING_PENALTY)
            total += best_score
            matched.append(best_index)
            best_score = -1
            best_index = -1
            pattern_index += 1

        last_index = position
        last = char

    if len(matched) != len(pattern):
        return None
    total += len(matched) - len(candidate)
    return Match(text=candidate, index=index, matched_indexes=matched, score=total)


def fuzzy_find(pattern: str, candidates: Sequence[str]) -> list[Match]:
    """Return the candidates containing ``pattern`` as a subsequence, best first.

    Letters are compared without regard to case; an empty pattern matches nothing.
    """
    if not pattern:
        return []
    found = (_match(pattern, text, index) for index, text in enumerate(candidates))
    matches = [match for match in found if match is not None]
    matches.sort(key=lambda match: match.score, reverse=True)
    return matches


def _filter_by_tag(workflows: Sequence[Workflow], tag: str) -> list[Workflow]:
    tag = tag.lower()
    return [w for w in workflows if any(t.lower() == tag for t in w.tags)]


def _index_of(workflows: Sequence[Workflow], target: Workflow) -> int:
    for index, workflow in enumerate(workflows):
        if workflow is target:
            return index
    for index, workflow in enumerate(workflows):
        if workflow.name == target.name:
            return index
    return -1


def search(query: str, tag_filter: str, workflows: Sequence[Workflow]) -> list[Match]:
    """Fuzzy-search ``workflows``, optionally keeping only those tagged ``tag_filter``.

    Match indexes refer to ``workflows``. An empty query returns every
    (filtered) workflow in its original order.
    """
    filtered = _filter_by_tag(workflows, tag_filter) if tag_filter else list(workflows)
    if not filtered:
        return []

    if not query:
        return [
            Match(text=searchable_text(workflow), index=_index_of(workflows, workflow))
            for workflow in filtered
        ]

    matches = fuzzy_find(query, [searchable_text(workflow) for workflow in filtered])
    for match in matches:
        match.index = _index_of(workflows, filtered[match.index])
    return matches