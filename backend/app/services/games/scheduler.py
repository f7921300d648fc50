import logging
from typing import Any, Callable, Optional


class ScheduledCall:
    """Handle for a deferred callback. Cancelling after it fired is harmless."""

    def __init__(self, name: str, delay_ms: int):
        self.name = name
        self.delay_ms = delay_ms
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class BackgroundScheduler:
    """Run deferred callbacks as Socket.IO background tasks.

    Works with whatever async mode the SocketIO server was configured
    with, since sleeping goes through ``socketio.sleep``.
    """

    def __init__(self, socketio, logger: Optional[logging.Logger] = None):
        self.socketio = socketio
        self.logger = logger or logging.getLogger(__name__)

    def call_later(self, delay_ms: int, callback: Callable[..., Any], *args: Any,
                   name: str = 'task') -> ScheduledCall:
        handle = ScheduledCall(name, delay_ms)

        def _runner():
            self.socketio.sleep(delay_ms / 1000.0)
            if handle.cancelled:
                self.logger.info(f"[timer-abort] {name} cancelled before firing")
                return
            handle.fired = True
            self.logger.info(f"[timer-fire] {name} after {delay_ms}ms")
            callback(*args)

        self.logger.info(f"[timer-set] {name} delay={delay_ms}ms")
        self.socketio.start_background_task(_runner)
        return handle
