# slackchat/core/__init__.py
from . import events  # re-export
from .state import SessionState
from .bus import Bus

__all__ = ["events", "SessionState", "Bus"]
