# zchat/__init__.py
"""
zchat: turn a natural-language request into a shell command, confirm it, run it.
"""

__version__ = '0.1.0'
