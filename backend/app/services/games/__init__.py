"""Game domain services: session state, scoring and timers.

This package contains the game mechanics that socket handlers and HTTP
routes call into, keeping transport concerns separated from the rules.
"""

from .session import SessionManager
from .scheduler import BackgroundScheduler, ScheduledCall

__all__ = ['SessionManager', 'BackgroundScheduler', 'ScheduledCall']
