# zchat/cli/__init__.py
"""
Command-line interface for zchat.
"""
from zchat.cli.main import app

__all__ = ['app']
