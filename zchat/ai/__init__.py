"""
Command generation for zchat.
"""
from .errors import GenerationError
from .parser import parse_command_from_response
from .prompts import build_system_prompt, build_full_prompt

__all__ = [
    'GenerationError',
    'parse_command_from_response',
    'build_system_prompt',
    'build_full_prompt',
]
