"""
Errors raised while generating commands.
"""


class GenerationError(Exception):
    """The model backend failed to produce a usable command."""
