"""
Status inference from frpc log output.

frpc has no structured status channel, so the panel watches its log lines for
a few known phrases. The phrases depend on frpc's exact wording.
"""

import re
from enum import Enum
from typing import Optional, Protocol, Sequence, Tuple

ANSI_ESCAPE = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')
LEVEL_TAG = re.compile(r'\[([TDIWE])\]')

LEVEL_TAGS = {
    "T": "debug",
    "D": "debug",
    "I": "info",
    "W": "warning",
    "E": "error",
}


class StatusHint(Enum):
    RUNNING = "running"
    CONNECTING = "connecting"
    FATAL = "fatal"


class LogClassifier(Protocol):
    def classify(self, line: str) -> Optional[StatusHint]:
        ...


class SubstringClassifier:
    """First rule whose phrase occurs in the line wins."""

    DEFAULT_RULES: Sequence[Tuple[str, StatusHint]] = (
        ("login to server success", StatusHint.RUNNING),
        ("try to connect to server", StatusHint.CONNECTING),
        ("port already used", StatusHint.FATAL),
        ("proxy exit with error", StatusHint.FATAL),
    )

    def __init__(self, rules: Optional[Sequence[Tuple[str, StatusHint]]] = None):
        self.rules = tuple(rules if rules is not None else self.DEFAULT_RULES)

    def classify(self, line: str) -> Optional[StatusHint]:
        for phrase, hint in self.rules:
            if phrase in line:
                return hint
        return None


default_classifier = SubstringClassifier()


def classify(line: str) -> Optional[StatusHint]:
    return default_classifier.classify(line)


def strip_ansi(line: str) -> str:
    return ANSI_ESCAPE.sub('', line)


def detect_level(line: str, default: str = "info") -> str:
    """Map frpc's [E]/[W]/[I]/[D]/[T] tag to a viewer level."""
    match = LEVEL_TAG.search(line)
    if not match:
        return default
    return LEVEL_TAGS[match.group(1)]
