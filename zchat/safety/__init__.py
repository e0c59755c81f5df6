# zchat/safety/__init__.py
"""
Safety checks for generated commands.

This package classifies commands against the configured dangerous patterns and
runs the confirmation gate that every command must pass before execution.
"""
from .classifier import SafetyPolicy, Verdict, classify_command
from .confirmation import (
    ConfirmationDecision,
    ConfirmationGate,
    GateResult,
    GateState,
    LineReader,
    Outcome,
    StreamLineReader,
)

__all__ = [
    'SafetyPolicy',
    'Verdict',
    'classify_command',
    'ConfirmationDecision',
    'ConfirmationGate',
    'GateResult',
    'GateState',
    'LineReader',
    'Outcome',
    'StreamLineReader',
]
