"""
Command execution for zchat.
"""
from .engine import (
    CommandFailed,
    ExecutionError,
    ExecutionResult,
    SafeExecutor,
    UnsafeCommandRefused,
)

__all__ = ['CommandFailed', 'ExecutionError', 'ExecutionResult', 'SafeExecutor', 'UnsafeCommandRefused']
