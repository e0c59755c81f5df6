# zchat/safety/classifier.py
"""
Dangerous-command classification for zchat.

Matching is plain case-insensitive substring containment. Patterns that look
like regular expressions (``curl.*|.*sh``) are matched literally, so they only
fire when that exact text appears in the command.
"""
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from zchat.constants import DEFAULT_DANGEROUS_PATTERNS

REASON_TEMPLATE = "Command contains dangerous pattern: {pattern}"


@dataclass(frozen=True)
class Verdict:
    """Result of classifying one command."""
    dangerous: bool
    pattern: Optional[str] = None

    @classmethod
    def safe(cls) -> "Verdict":
        return cls(dangerous=False)

    @classmethod
    def matched(cls, pattern: str) -> "Verdict":
        return cls(dangerous=True, pattern=pattern)

    @property
    def reason(self) -> str:
        """Human-readable reason; empty for a safe verdict."""
        if not self.dangerous:
            return ""
        return REASON_TEMPLATE.format(pattern=self.pattern)


def classify_command(command: str, patterns: Iterable[str]) -> Verdict:
    """
    Classify a command against an ordered list of dangerous patterns.

    Args:
        command: The untrusted command string.
        patterns: Dangerous fragments, checked in order.

    Returns:
        A dangerous verdict naming the first matching pattern (in its original
        case), or a safe verdict when nothing matches.
    """
    command_lower = command.lower()
    for pattern in patterns:
        if pattern.lower() in command_lower:
            return Verdict.matched(pattern)
    return Verdict.safe()


@dataclass(frozen=True)
class SafetyPolicy:
    """The dangerous-pattern list for one run. Built once from configuration."""
    patterns: Tuple[str, ...] = DEFAULT_DANGEROUS_PATTERNS

    def classify(self, command: str) -> Verdict:
        return classify_command(command, self.patterns)
