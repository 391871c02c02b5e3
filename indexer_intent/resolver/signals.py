"""
Signal extraction over free-form conversation text.

Three signal classes are recognised: the subject of the request (a token symbol
or contract address), the action (what to do with it) and the scope (which
blocks). Detection flags and the recorded phrases are kept separate because
some words count as evidence without naming anything usable in a query, e.g.
"token" proves a subject was discussed but is not itself a symbol.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, List, Pattern, Tuple

from indexer_intent.utils.ordered_set import OrderedSet

KNOWN_TOKEN_SYMBOLS: Tuple[str, ...] = ("USDC", "USDT", "WETH")
ACTION_VERBS: Tuple[str, ...] = ("index", "track", "monitor", "get", "find", "collect", "gather")
ALL_TRANSFERS_ACTION = "index all transfers"

ADDRESS_PATTERN = re.compile(r"0x[a-f0-9]{40}", re.IGNORECASE)
BLOCK_NUMBER_PATTERN = re.compile(r"\b\d{7,}\b")

_SYMBOL_PATTERN = re.compile(
    r"\b(" + "|".join(KNOWN_TOKEN_SYMBOLS) + r")\b", re.IGNORECASE
)
_VERB_PATTERN = re.compile(r"\b(" + "|".join(ACTION_VERBS) + r")\b", re.IGNORECASE)
_ALL_TRANSFERS_PATTERN = re.compile(r"\ball transfers\b", re.IGNORECASE)
_RECENCY_PATTERN = re.compile(r"\b(latest|recent)\b", re.IGNORECASE)
_RANGE_START_PATTERN = re.compile(r"\bfrom\b", re.IGNORECASE)
_RANGE_END_PATTERN = re.compile(r"\bto\b", re.IGNORECASE)

SUBJECT_FLAG_PATTERNS: Tuple[Pattern, ...] = (
    _SYMBOL_PATTERN,
    re.compile(r"\b(token|ethereum)\b", re.IGNORECASE),
    ADDRESS_PATTERN,
)
ACTION_FLAG_PATTERNS: Tuple[Pattern, ...] = (_VERB_PATTERN, _ALL_TRANSFERS_PATTERN)
SCOPE_FLAG_PATTERNS: Tuple[Pattern, ...] = (
    re.compile(r"\bblock\b", re.IGNORECASE),
    _RECENCY_PATTERN,
    BLOCK_NUMBER_PATTERN,
)


@dataclass(frozen=True)
class ExtractedSignals:
    """Signals found in one block of text."""

    has_subject: bool = False
    has_action: bool = False
    has_scope: bool = False
    found_subjects: OrderedSet = field(default_factory=OrderedSet)
    found_actions: OrderedSet = field(default_factory=OrderedSet)
    found_scopes: OrderedSet = field(default_factory=OrderedSet)


def _matches_any(patterns: Tuple[Pattern, ...], text: str) -> bool:
    return any(pattern.search(text) for pattern in patterns)


def _mentions_range(text: str) -> bool:
    """True for a "from ... to ..." range. A "to" only counts after the first "from"."""
    start = _RANGE_START_PATTERN.search(text)
    return bool(start and _RANGE_END_PATTERN.search(text, start.end()))


def _collect(text: str, rules: List[Tuple[Pattern, Callable[[re.Match], str]]]) -> OrderedSet:
    """Runs every rule and records the rendered phrases in order of first mention."""
    hits: List[Tuple[int, int, str]] = []
    for rule_index, (pattern, render) in enumerate(rules):
        for match in pattern.finditer(text):
            hits.append((match.start(), rule_index, render(match)))
    hits.sort(key=lambda hit: (hit[0], hit[1]))
    return OrderedSet(phrase for _, _, phrase in hits)


_SUBJECT_RULES = [
    (_SYMBOL_PATTERN, lambda m: m.group(1).upper()),
    (ADDRESS_PATTERN, lambda m: m.group(0).lower()),
]
_ACTION_RULES = [
    (_VERB_PATTERN, lambda m: m.group(1).lower()),
    (_ALL_TRANSFERS_PATTERN, lambda m: ALL_TRANSFERS_ACTION),
]
_SCOPE_RULES = [
    (BLOCK_NUMBER_PATTERN, lambda m: f"block {m.group(0)}"),
    (_RECENCY_PATTERN, lambda m: f"{m.group(1).lower()} blocks"),
]


def extract(text: str) -> ExtractedSignals:
    """Scans `text` for subject, action and scope signals."""
    text = text or ""
    return ExtractedSignals(
        has_subject=_matches_any(SUBJECT_FLAG_PATTERNS, text),
        has_action=_matches_any(ACTION_FLAG_PATTERNS, text),
        has_scope=_matches_any(SCOPE_FLAG_PATTERNS, text) or _mentions_range(text),
        found_subjects=_collect(text, _SUBJECT_RULES),
        found_actions=_collect(text, _ACTION_RULES),
        found_scopes=_collect(text, _SCOPE_RULES),
    )
