"""
Terminal presentation for zchat.
"""
from .formatter import TerminalFormatter, OutputType

__all__ = ['TerminalFormatter', 'OutputType']
