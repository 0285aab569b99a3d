"""Elapsed-time display refresh running on a background thread."""
import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


def format_elapsed(seconds: int) -> str:
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{secs:02d}"


class ElapsedTicker:
    """Calls ``callback`` every ``interval`` seconds until stopped.

    The callback may read session state but must not change it. Only one
    ticker thread exists at a time: ``start`` stops the previous one first.
    """

    def __init__(self, callback: Callable[[], None], interval: float = 1.0):
        self.callback = callback
        self.interval = interval
        self._stop: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        self.stop()
        stop = threading.Event()
        thread = threading.Thread(target=self._run, args=(stop,), name="elapsed-ticker", daemon=True)
        self._stop = stop
        self._thread = thread
        thread.start()

    def stop(self) -> None:
        if self._stop is None:
            return
        self._stop.set()
        if self._thread is not threading.current_thread():
            self._thread.join(timeout=self.interval + 1)
        self._stop = None
        self._thread = None

    def toggle(self) -> bool:
        """Pause a running ticker or resume a stopped one. Returns whether it now runs."""
        if self.running:
            self.stop()
            return False
        self.start()
        return True

    def _run(self, stop: threading.Event) -> None:
        while not stop.wait(self.interval):
            try:
                self.callback()
            except Exception:
                logger.exception("Ticker callback failed, stopping")
                return
