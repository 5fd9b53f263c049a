import time
from typing import Callable


class EvictionScheduler:
    """Run session clean-up callbacks after a delay on a Socket.IO background task.

    - No-ops in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
    - Callbacks run inside an app context
    - Nothing is cancelled here: callers arm a token and the callback checks
      it is still current when it fires
    """

    def __init__(self, app, socketio):
        self.app = app
        self.socketio = socketio

    @property
    def enabled(self) -> bool:
        cfg = self.app.config
        return not cfg.get('TESTING') or bool(cfg.get('ENABLE_SCHEDULER_IN_TESTS'))

    def call_later(self, delay: float, fn: Callable, *args) -> bool:
        """Schedule ``fn(*args)``; returns False when timers are disabled."""
        if not self.enabled:
            return False
        label = getattr(fn, '__name__', 'callback')
        self.app.logger.info(f"[timer-set] {label}{args} in {delay}s")

        def _worker():
            if delay > 0:
                time.sleep(delay)
            with self.app.app_context():
                self.app.logger.info(f"[timer-fire] {label}{args}")
                try:
                    fn(*args)
                except Exception:
                    self.app.logger.exception(f"[timer-error] {label}{args}")

        self.socketio.start_background_task(_worker)
        return True
