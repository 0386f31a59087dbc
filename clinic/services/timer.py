"""
Session timer.

Local stopwatch used during consultations. Nothing is persisted.

    stopped --start--> running --pause--> stopped
    any     --reset--> stopped, elapsed = 0
"""
import threading

from clinic.services.time_utils import format_elapsed

STOPPED = "stopped"
RUNNING = "running"


class Ticker:
    """Calls ``callback`` every ``interval`` seconds on a daemon thread until cancelled."""

    def __init__(self, interval: float, callback):
        self.interval = interval
        self.callback = callback
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)

    def start(self):
        self._thread.start()

    def _run(self):
        while not self._stop.wait(self.interval):
            self.callback()

    def cancel(self):
        self._stop.set()


class SessionTimer:
    def __init__(self, interval: float = 1.0, ticker_factory=Ticker):
        self.interval = interval
        self._ticker_factory = ticker_factory
        self._ticker = None
        self._lock = threading.Lock()
        self.state = STOPPED
        self.elapsed = 0

    def start(self):
        with self._lock:
            if self.state == RUNNING:
                return
            self.state = RUNNING
            self._ticker = self._ticker_factory(self.interval, self.tick)
            self._ticker.start()

    def pause(self):
        with self._lock:
            self._cancel()
            self.state = STOPPED

    def reset(self):
        with self._lock:
            self._cancel()
            self.state = STOPPED
            self.elapsed = 0

    def toggle(self):
        if self.state == RUNNING:
            self.pause()
        else:
            self.start()

    def tick(self):
        with self._lock:
            if self.state == RUNNING:
                self.elapsed += 1

    def _cancel(self):
        ticker, self._ticker = self._ticker, None
        if ticker is not None:
            ticker.cancel()

    def display(self) -> str:
        return format_elapsed(self.elapsed)

    def view(self) -> dict:
        return {"state": self.state, "elapsed": self.elapsed, "display": self.display()}

    def close(self):
        self.pause()
