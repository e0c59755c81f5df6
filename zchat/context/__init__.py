"""
Context collection for zchat.
"""
from .collector import ContextCollector, SystemContext

__all__ = ['ContextCollector', 'SystemContext']
