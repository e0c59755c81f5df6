# zchat/__main__.py
"""
Entry point for zchat.
"""
from zchat.cli import app

if __name__ == "__main__":
    app()
